"""Per-invocation settings, resolved once from CLI arguments and environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from savedit.const import CODEC_ENV, DEFAULT_CODEC, DEFAULT_EDITOR, EDITOR_ENV


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for a single command.

    Attributes:
        editor: Editor command line (not yet tokenized)
        codec: Codec name or ``module:attribute`` import path
    """

    editor: str = DEFAULT_EDITOR
    codec: str = DEFAULT_CODEC

    @classmethod
    def resolve(
        cls,
        editor: str | None = None,
        codec: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Settings:
        """Build settings, explicit values first, then environment, then defaults.

        An explicitly passed empty string is kept as is, so that
        ``--editor ""`` is reported as an empty editor command rather than
        silently replaced.
        """
        if environ is None:
            environ = os.environ

        if editor is None:
            editor = environ.get(EDITOR_ENV, DEFAULT_EDITOR)
        if codec is None:
            codec = environ.get(CODEC_ENV) or DEFAULT_CODEC

        return cls(editor=editor, codec=codec)
