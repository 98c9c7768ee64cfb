from __future__ import annotations

from fin_ingest.shared.utils import compute_content_sha256


def test_compute_content_sha256_is_stable() -> None:
    digest = compute_content_sha256(b"Date,Description,Amount\n")
    assert digest == compute_content_sha256(b"Date,Description,Amount\n")
    assert len(digest) == 64
    assert digest != compute_content_sha256(b"Date,Description,Amount\r\n")


def test_compute_content_sha256_known_value() -> None:
    assert (
        compute_content_sha256(b"")
        == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )
