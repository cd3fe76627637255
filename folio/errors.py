"""Build errors for Folio.

Every failure the pipeline can report carries the source path it is
attributable to, a human-readable message and the original exception (if
any). The ``kind`` attribute is the name printed in build summaries.

Per-document errors (encoding, front-matter) and per-page template errors
can be collected under best-effort builds. Errors with ``fatal = True``
always stop the build because they break the output as a whole.
"""

from __future__ import annotations

from pathlib import Path


class FolioError(Exception):
    """Error during a site build with file context.

    Attributes:
        source_path: Path of the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    kind = "BuildError"
    fatal = False

    def __init__(
        self,
        source_path: Path | str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = Path(source_path)
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class EncodingError(FolioError):
    """A source file is not valid UTF-8."""

    kind = "EncodingError"


class MalformedFrontMatterError(FolioError):
    """The front-matter block is present but cannot be used."""

    kind = "MalformedFrontMatterError"


class MissingRequiredFieldError(FolioError):
    """A required front-matter field (``title`` or ``date``) is absent."""

    kind = "MissingRequiredFieldError"

    def __init__(
        self,
        source_path: Path | str,
        field_name: str,
        original_error: Exception | None = None,
    ):
        self.field_name = field_name
        super().__init__(
            source_path,
            f"Missing required front-matter field '{field_name}'",
            original_error,
        )


class PermalinkCollisionError(FolioError):
    """Two pages resolve to the same permalink."""

    kind = "PermalinkCollisionError"
    fatal = True

    def __init__(
        self,
        source_path: Path | str,
        permalink: str,
        other_path: Path | str,
    ):
        self.permalink = permalink
        self.other_path = Path(other_path)
        super().__init__(
            source_path,
            f"Permalink '/{permalink}' is also used by {other_path}",
        )


class TemplateNotFoundError(FolioError):
    """No template exists for the name a page resolved to."""

    kind = "TemplateNotFoundError"

    def __init__(
        self,
        source_path: Path | str,
        template_name: str,
        original_error: Exception | None = None,
    ):
        self.template_name = template_name
        super().__init__(
            source_path, f"Template '{template_name}' not found", original_error
        )


class TemplateRenderError(FolioError):
    """A template failed while rendering a page."""

    kind = "TemplateRenderError"

    def __init__(
        self,
        source_path: Path | str,
        template_name: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.template_name = template_name
        super().__init__(
            source_path, f"{message} (template '{template_name}')", original_error
        )


class WriteError(FolioError):
    """Writing the output tree failed."""

    kind = "WriteError"
    fatal = True


class ConfigError(FolioError):
    """The site config file cannot be used."""

    kind = "ConfigError"
    fatal = True
