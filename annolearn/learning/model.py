"""
Packaging and unpacking of model artifacts.

A model is a single zip file holding

* `MANIFEST.json`: format version, backend name, encoder options
* the encoder tables (`names.tsv`, `outcomes.tsv`, maybe
  `vocabulary.tsv`)
* `parameters.npz`: the trained parameters, whose meaning is up to
  the backend

The artifact is assembled in a temporary file and renamed into place,
so that `model.zip` only ever exists once training is complete.
"""

# License: BSD3

from contextlib import contextmanager
import json
import os
import shutil
import tempfile
import zipfile

from .errors import CorruptModelError, MissingArtifactError


FORMAT_VERSION = 1
"""
Structural version of the model bundle; bump whenever the layout
of the bundle changes
"""

MODEL_FILE = 'model.zip'
MANIFEST_FILE = 'MANIFEST.json'
PARAMETERS_FILE = 'parameters.npz'


def model_path(dirname):
    """
    Where a data writer for output directory `dirname` puts its model
    """
    return os.path.join(dirname, MODEL_FILE)


def package_model(staging_dir, manifest, dest):
    """
    Bundle the files of `staging_dir` together with the manifest into
    a model file at `dest`.

    The bundle is written to a temporary file next to `dest` and only
    renamed to `dest` once complete.
    """
    manifest = dict(manifest, format_version=FORMAT_VERSION)
    fd, tmp_path = tempfile.mkstemp(prefix='.model-', suffix='.tmp',
                                    dir=os.path.dirname(dest) or '.')
    os.close(fd)
    try:
        with zipfile.ZipFile(tmp_path, 'w', zipfile.ZIP_DEFLATED) as zfile:
            zfile.writestr(MANIFEST_FILE,
                           json.dumps(manifest, indent=2, sort_keys=True))
            for fname in sorted(os.listdir(staging_dir)):
                zfile.write(os.path.join(staging_dir, fname), fname)
        os.replace(tmp_path, dest)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    return dest


def _read_manifest(zfile, path):
    """Read and check the manifest of an open bundle"""
    try:
        raw = zfile.read(MANIFEST_FILE)
    except KeyError:
        raise CorruptModelError('{0}: no {1}'.format(path, MANIFEST_FILE))
    try:
        manifest = json.loads(raw.decode('utf-8'))
    except ValueError as err:
        raise CorruptModelError('{0}: unreadable manifest ({1})'.format(
            path, err))
    if not isinstance(manifest, dict):
        raise CorruptModelError('{0}: malformed manifest'.format(path))
    version = manifest.get('format_version')
    if version != FORMAT_VERSION:
        raise CorruptModelError(
            '{0}: model format version {1!r}, expected {2}'.format(
                path, version, FORMAT_VERSION))
    return manifest


@contextmanager
def open_model(path):
    """
    Unpack a model for reading.

    Yields `(manifest, dirname)`, where `dirname` is a temporary
    directory holding the unpacked bundle (deleted on exit). The
    format version is checked before anything else is unpacked.

    Parameters
    ----------
    path: string
        The model file, or the directory a data writer wrote it to
    """
    if os.path.isdir(path):
        path = model_path(path)
    if not os.path.isfile(path):
        raise MissingArtifactError('no model at {0}'.format(path))

    tmp_dir = tempfile.mkdtemp(prefix='annolearn-model-')
    try:
        try:
            with zipfile.ZipFile(path) as zfile:
                manifest = _read_manifest(zfile, path)
                zfile.extractall(tmp_dir)
        except zipfile.BadZipFile as err:
            raise CorruptModelError('{0}: {1}'.format(path, err))
        yield manifest, tmp_dir
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
