"""
Local upload storage - file naming and path handling.
"""
import pytest

from src.core.exceptions import StorageError
from src.core.storage import LocalStorage, safe_filename


def test_safe_filename_keeps_extension_and_adds_uuid():
    name = safe_filename("tapu senedi.pdf")
    assert name.startswith("tapu_senedi-")
    assert name.endswith(".pdf")
    assert len(name) == len("tapu_senedi-") + 36 + len(".pdf")


def test_safe_filename_strips_directories():
    name = safe_filename("../../etc/passwd")
    assert "/" not in name
    assert name.startswith("etc_passwd-")


def test_safe_filename_without_usable_stem():
    assert safe_filename("文件").startswith("file-")


def test_concurrent_names_never_collide():
    assert safe_filename("kroki.dwg") != safe_filename("kroki.dwg")


def test_save_and_delete(tmp_path):
    storage = LocalStorage(tmp_path)
    key = storage.save_bytes(b"data", "proje.pdf", "edas-documents")

    assert key.startswith("edas-documents/proje-")
    assert storage.exists(key)
    assert storage.delete(key) is True
    assert storage.delete(key) is False


def test_resolve_refuses_escaping_keys(tmp_path):
    storage = LocalStorage(tmp_path)
    with pytest.raises(StorageError):
        storage.resolve("../outside.txt")
