from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from urllib.parse import urlparse

from producshine.domain.entities.tool import ToolEntity
from producshine.domain.errors import AuthRequiredError, ValidationError
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.storage.supabase_storage import SupabaseStorage

MAX_LOGO_BYTES = 5 * 1024 * 1024


@dataclass
class ToolSubmission:
    title: str
    description: str
    url: str
    launch_date: date | None = None
    is_paid: bool = False
    logo: bytes | None = None


def _is_web_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass
class SubmitToolUseCase:
    tools: ToolRepository
    storage: SupabaseStorage

    def execute(self, user_id: str | None, submission: ToolSubmission) -> ToolEntity:
        """
        Publish a new tool on behalf of ``user_id``.

        Fields are trimmed; the logo, if any, is uploaded before the row is
        inserted so the row can carry its public URL.
        """
        if not user_id:
            raise AuthRequiredError("Please sign in to submit a tool.")

        title = submission.title.strip()
        description = submission.description.strip()
        url = submission.url.strip()
        if not title or not description or not url:
            raise ValidationError("Please fill in all required fields.")
        if not _is_web_url(url):
            raise ValidationError("Please enter a valid website URL.")

        logo_url = None
        if submission.logo:
            if len(submission.logo) > MAX_LOGO_BYTES:
                raise ValidationError("Please select an image smaller than 5MB.")
            try:
                stored = self.storage.upload_image(submission.logo)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            logo_url = stored.url

        return self.tools.create(
            user_id=user_id,
            title=title,
            description=description,
            url=url,
            launch_date=submission.launch_date or date.today(),
            is_paid=submission.is_paid,
            logo_url=logo_url,
        )
