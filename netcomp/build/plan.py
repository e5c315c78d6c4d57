from collections import OrderedDict
import hashlib
import logging
import os
import pathlib
import zipfile


__all__ = ["BuildPlan"]


logger = logging.getLogger(__name__)


class BuildPlan:
    """Every file produced by compiling one netlist, held in memory until written out.

    Compilation fills the plan completely before anything touches the filesystem, so a netlist
    that fails to compile leaves no output behind.

    Parameters
    ----------
    name : str
        Name of the compiled circuit.
    """
    def __init__(self, name):
        self.name  = name
        self.files = OrderedDict()

    def add_file(self, filename, content):
        """Record ``content`` (text or bytes) under the relative path ``filename``.

        Directories in ``filename`` are separated by ``/``.

        Raises
        ------
        :exc:`ValueError`
            If ``filename`` is absolute.
        """
        assert isinstance(filename, str) and filename not in self.files
        if (pathlib.PurePosixPath(filename).is_absolute() or
                pathlib.PureWindowsPath(filename).is_absolute()):
            raise ValueError(f"Filename {filename!r} must not be an absolute path")
        self.files[filename] = content

    def digest(self, size=64):
        """Hash of the circuit name and every file name and content, independent of the order
        in which files were added."""
        hasher = hashlib.blake2b(digest_size=size)
        for filename in sorted(self.files):
            hasher.update(filename.encode("utf-8"))
            content = self.files[filename]
            if isinstance(content, str):
                content = content.encode("utf-8")
            hasher.update(content)
        hasher.update(self.name.encode("utf-8"))
        return hasher.digest()

    def archive(self, file):
        """Write the generated files as a zip archive into ``file`` (a path or a binary file).

        Members are sorted by name and carry a fixed timestamp, so the same netlist always
        produces the same archive bytes.
        """
        with zipfile.ZipFile(file, "w") as archive:
            for filename in sorted(self.files):
                archive.writestr(zipfile.ZipInfo(filename), self.files[filename])

    def extract(self, root="build"):
        """Write the generated files under the directory ``root``, creating it if needed.

        Returns the resolved :class:`pathlib.Path` of ``root``.
        """
        root = pathlib.Path(root)
        logger.info(f"Creating directory '{root}/'")
        os.makedirs(root, exist_ok=True)

        for filename, content in self.files.items():
            path = pathlib.PurePosixPath(filename)
            # Generated files stay inside `root`.
            assert not path.is_absolute() and ".." not in path.parts
            target = root.joinpath(*path.parts)
            if target.parent != root:
                os.makedirs(target.parent, exist_ok=True)

            if isinstance(content, str):
                content = content.encode("utf-8")
            logger.info(f"Writing to '{target}'")
            with open(target, "wb") as f:
                f.write(content)
            logger.debug(f"Wrote {len(content)} bytes to '{target}'")
        return root.resolve()
