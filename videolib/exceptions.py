"""
Catalog Exceptions

Every catalog error derives from CatalogError and carries the HTTP status
the gateway answers with. Media tool errors never leave the thumbnail
pipeline; they are recovered into placeholders, empty lists or None.
"""

from typing import Optional


class CatalogError(Exception):
    """Base catalog exception"""

    status_code = 500

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            return f"[{self.context}] {self.message}"
        return self.message


class NotFoundError(CatalogError):
    """
    Referenced entity does not exist

    Attributes:
        entity: Entity kind (video, tag, thumbnail)
        identifier: The id or filename that was looked up
    """

    status_code = 404

    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity.capitalize()} not found: {identifier}")


class DuplicateNameError(CatalogError):
    """Tag name already exists (case-insensitive)"""

    status_code = 409

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Tag "{name}" already exists')


class ConstraintViolationError(CatalogError):
    """
    Unique constraint violated on insert

    Raised for a duplicate video file path. Ingest treats it as
    "already cataloged".
    """

    status_code = 409

    def __init__(self, message: str, file_path: Optional[str] = None):
        self.file_path = file_path
        super().__init__(message, file_path)


class BadInputError(CatalogError):
    """Malformed payload or missing required field"""

    status_code = 400


class MediaToolError(CatalogError):
    """
    ffmpeg/ffprobe failed

    Attributes:
        stderr: Tool error output (if any)
    """

    def __init__(self, message: str, stderr: Optional[str] = None):
        self.stderr = stderr
        super().__init__(message)


class MediaToolUnavailableError(MediaToolError):
    """ffmpeg/ffprobe is not installed"""

    def __init__(self, tool: str = "ffmpeg"):
        self.tool = tool
        super().__init__(f"{tool} not available")
