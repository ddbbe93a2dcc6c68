"""Write a file safely: write a temporary file next to it and move it with rename"""

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO


@contextmanager
def atomic_write(output_file: Path, suffix: str = ".tmp") -> Iterator[BinaryIO]:
    """
    Yield a binary file that replaces output_file once the block exits.

    If the block raises, the temporary file is removed and output_file is
    left as it was.
    """
    output_dir = output_file.parent
    with tempfile.NamedTemporaryFile(suffix=suffix, dir=output_dir, delete=False) as f:
        temp_path = f.name
        try:
            yield f
            f.flush()
            os.fsync(f.fileno())
        except BaseException:
            f.close()
            _remove_quietly(temp_path)
            raise

    try:
        os.replace(temp_path, output_file)
    except OSError as e:
        logging.getLogger("Move").error("Error moving %s to %s: %s", temp_path, output_file, e)
        _remove_quietly(temp_path)
        raise


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except OSError:
        pass
