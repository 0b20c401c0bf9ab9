"""Unit tests for FileIntake."""

import io

import pytest

from portal_api.uploads import FileIntake


class TestFileIntake:
    def test_names_file_after_field_and_timestamp(self, tmp_path):
        intake = FileIntake(tmp_path / "uploads", clock=lambda: 1700000000.5)
        stored = intake.accept("cv", io.BytesIO(b"hello"), "My Resume.pdf", "application/pdf")
        assert stored.filename == "cv-1700000000500.pdf"
        assert stored.originalname == "My Resume.pdf"
        assert stored.size == 5
        assert stored.mimetype == "application/pdf"
        assert (tmp_path / "uploads" / stored.filename).read_bytes() == b"hello"
        assert stored.path == str(tmp_path / "uploads" / stored.filename)

    def test_same_millisecond_uploads_do_not_collide(self, tmp_path):
        intake = FileIntake(tmp_path, clock=lambda: 1700000000.0)
        first = intake.accept("cv", io.BytesIO(b"one"), "a.pdf")
        second = intake.accept("cv", io.BytesIO(b"two"), "b.pdf")
        third = intake.accept("cv", io.BytesIO(b"three"), "c.pdf")
        assert [first.filename, second.filename, third.filename] == [
            "cv-1700000000000.pdf",
            "cv-1700000000000-1.pdf",
            "cv-1700000000000-2.pdf",
        ]
        assert (tmp_path / first.filename).read_bytes() == b"one"
        assert (tmp_path / second.filename).read_bytes() == b"two"

    def test_directory_components_of_original_name_are_dropped(self, tmp_path):
        intake = FileIntake(tmp_path / "up", clock=lambda: 1.0)
        stored = intake.accept("cv", io.BytesIO(b"x"), "../../etc/resume.docx")
        assert stored.filename == "cv-1000.docx"
        assert stored.originalname == "resume.docx"
        assert (tmp_path / "up" / "cv-1000.docx").exists()

    def test_missing_original_name_has_no_extension(self, tmp_path):
        stored = FileIntake(tmp_path, clock=lambda: 2.0).accept("cv", io.BytesIO(b""), None)
        assert stored.filename == "cv-2000"
        assert stored.size == 0

    def test_failed_copy_leaves_no_partial_file(self, tmp_path):
        class BrokenStream:
            def __init__(self):
                self.calls = 0

            def read(self, size=-1):
                self.calls += 1
                if self.calls == 1:
                    return b"partial"
                raise OSError("connection reset")

        intake = FileIntake(tmp_path, clock=lambda: 3.0)
        with pytest.raises(OSError):
            intake.accept("cv", BrokenStream(), "cv.pdf")
        assert list(tmp_path.iterdir()) == []

        # the name is free again for the next upload
        stored = intake.accept("cv", io.BytesIO(b"ok"), "cv.pdf")
        assert stored.filename == "cv-3000.pdf"
