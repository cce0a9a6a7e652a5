"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use JSPCOMPOSE_ prefix (e.g., JSPCOMPOSE_MINIMIZE=true).

Settings can also be loaded from a .env file in the project root.
"""

import codecs
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.directives import LAYOUT_VARIABLE, CHARSET_NAME


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use JSPCOMPOSE_ prefix.

    Examples:
        JSPCOMPOSE_JSP_DIR=/WEB-INF/templates
        JSPCOMPOSE_PAGE_ENCODING=UTF-8
        JSPCOMPOSE_MINIMIZE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="JSPCOMPOSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Tree layout
    jsp_dir: str = Field(
        default="/WEB-INF/__jsp",
        description="Path suffix identifying a template directory under the input root",
    )

    gen_dir_name: str = Field(
        default="jsp",
        description="Name of the generated directory, created beside the template directory",
    )

    config_dir_name: str = Field(
        default="__config",
        description="Directory inside a template directory holding layouts and variable files",
    )

    template_extension: str = Field(
        default=".jsp",
        description="Extension (case-insensitive) of documents that are composed",
    )

    # Composition
    layout_variable: str = Field(
        default=LAYOUT_VARIABLE,
        description="Reserved variable naming the layout a page inherits",
    )

    include_suffix: str = Field(
        default="_inc",
        description="Suffix inserted before the extension of a page's body include",
    )

    minimize: bool = Field(
        default=False,
        description="Strip blank lines from composed output",
    )

    # Page directive policy
    session: bool = Field(
        default=False,
        description="Value enforced for the session attribute",
    )

    trim_directive_whitespaces: bool = Field(
        default=True,
        description="Value enforced for the trimDirectiveWhitespaces attribute",
    )

    page_encoding: Optional[str] = Field(
        default=None,
        description="Charset used for documents and enforced as pageEncoding (unset = not enforced)",
    )

    # I/O
    default_encoding: str = Field(
        default="utf-8",
        description="Charset used for documents when no page encoding is configured",
    )

    line_separator: str = Field(
        default="\n",
        description="Separator written between output lines",
    )

    def includeName_make(self, page_name: str) -> str:
        """
        Derive the body include file name of a page.

        Example:
            >>> AppSettings().includeName_make("index.jsp")
            'index_inc.jsp'
        """
        stem, dot, extension = page_name.rpartition(".")
        if not dot or not stem:
            return f"{page_name}{self.include_suffix}"
        return f"{stem}{self.include_suffix}.{extension}"

    def layoutFile_make(self, layout_name: str) -> str:
        """
        File name of a layout document.

        Example:
            >>> AppSettings().layoutFile_make("main")
            'main.jsp'
        """
        return f"{layout_name}{self.template_extension}"

    def pageEncoding_get(self) -> Optional[str]:
        """Configured page encoding, or None when blank or unset"""
        return (self.page_encoding or "").strip() or None

    def encoding_resolve(self) -> str:
        """
        Codec used for template documents.

        Returns:
            The configured page encoding, or the default encoding

        Raises:
            LookupError: If the codec name is unknown, or the page encoding
                         cannot be written as a pageEncoding attribute
        """
        page_encoding = self.pageEncoding_get()
        if page_encoding and not CHARSET_NAME.fullmatch(page_encoding):
            raise LookupError(f"invalid charset name: {page_encoding}")
        encoding = page_encoding or self.default_encoding
        codecs.lookup(encoding)
        return encoding


# Singleton instance - import this in your code
appsettings = AppSettings()
