"""
Edit a save file as JSON in an external editor.

Workflow:
- decode the save and write it as JSON to a temporary file
- run the editor on that file and wait for it to exit
- parse the edited JSON and encode it
- overwrite the save only if the encoded bytes differ from the original

The save is written last, after every decode/parse/encode step succeeded.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any

from savedit.bridge import SerializationBridge
from savedit.const import TEMP_SUFFIX
from savedit.errors import EditorInvocationError
from savedit.log import log
from savedit.streams import read_file, write_file


class EditOutcome(Enum):
    UNCHANGED = 'unchanged'
    MODIFIED = 'modified'


def parse_editor_command(command: str) -> list[str]:
    """Split an editor command line with shell quoting rules.

    Raises:
        EditorInvocationError: If the command is empty or cannot be tokenized
    """
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise EditorInvocationError(f'Cannot parse editor command {command!r}: {e}') from e

    if not argv:
        raise EditorInvocationError('Editor command is empty')
    return argv


class EditorSession:
    """Temporary JSON file and the editor process working on it.

    Use as a context manager; the temporary file is removed on exit.
    """

    def __init__(self, text: str, suffix: str = TEMP_SUFFIX) -> None:
        self.text = text
        self.suffix = suffix
        self.path: Path | None = None

    def __enter__(self) -> EditorSession:
        fd, name = tempfile.mkstemp(prefix='savedit-', suffix=self.suffix)
        self.path = Path(name)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(self.text)
        except BaseException:
            self.path.unlink(missing_ok=True)
            raise
        log.debug(f'Staged {len(self.text)} characters in {self.path}')
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self.path is not None:
            self.path.unlink(missing_ok=True)
            log.debug(f'Removed {self.path}')
            self.path = None

    def launch(self, argv: list[str]) -> int:
        """Run the editor on the temporary file and block until it exits.

        The file is passed after ``--`` so it is never taken for an option.
        The child shares this process's terminal. There is no timeout.

        Returns:
            Editor exit status. Non-zero is logged but not treated as failure.
        """
        command = [*argv, '--', str(self.path)]
        log.debug(f'Launching editor: {shlex.join(command)}')

        try:
            completed = subprocess.run(command, check=False)
        except OSError as e:
            raise EditorInvocationError(f'Cannot start editor {argv[0]!r}: {e.strerror or e}') from e

        if completed.returncode != 0:
            log.warning(f'Editor exited with status {completed.returncode}, reading the file anyway')
        return completed.returncode

    def read_text(self) -> str:
        return SerializationBridge.decode_text(self.path.read_bytes())


def edit_save(path: Path, editor: str, bridge: SerializationBridge) -> EditOutcome:
    """Edit ``path`` in place through its JSON form.

    Raises:
        EditorInvocationError: Bad editor command or editor failed to start
        DecodeError: The save cannot be decoded
        MalformedText: The edited JSON is invalid; the save is left untouched
    """
    argv = parse_editor_command(editor)

    original = read_file(path)
    document = bridge.decode(original)

    with EditorSession(bridge.to_text(document)) as session:
        session.launch(argv)
        edited = bridge.from_text(session.read_text())

    updated = bridge.encode(edited)
    if updated == original:
        print('File unchanged, doing nothing.')
        return EditOutcome.UNCHANGED

    print('File modified, writing new save.')
    write_file(path, updated)
    log.debug(f'Wrote {len(updated)} bytes to {path}')
    return EditOutcome.MODIFIED
