"""
Prescription storage tests.
"""

import hashlib
import io

from lenscart.components.lens_config import initial_state
from lenscart.components.prescriptions import (
    FetchPrescriptionInput,
    UploadPrescriptionInput,
    constraints_from_rules,
    generate_storage_key,
    mime_to_extension,
    run_fetch,
    run_upload,
    upload_into_builder,
)
from lenscart.rules.models import PrescriptionUploadRules

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def upload(data=PNG, content_type="image/png", owner_key="session-123", filename="rx.png"):
    return UploadPrescriptionInput(
        data=data, filename=filename, content_type=content_type, owner_key=owner_key
    )


class TestHelpers:
    def test_storage_key_layout(self) -> None:
        assert generate_storage_key("abc", "f1", "pdf") == "prescriptions/abc/f1.pdf"

    def test_extensions(self) -> None:
        assert mime_to_extension("image/jpeg") == "jpg"
        assert mime_to_extension("image/jpg") == "jpg"
        assert mime_to_extension("application/pdf") == "pdf"
        assert mime_to_extension("text/plain") == "bin"

    def test_constraints_from_rules(self) -> None:
        rules = PrescriptionUploadRules(allowed_mime_types=["application/pdf"], max_upload_bytes=1000)
        constraints = constraints_from_rules(rules)
        assert constraints.allowed_mime_types == ("application/pdf",)
        assert constraints.max_upload_bytes == 1000


class TestRunUpload:
    def test_stores_under_owner_prefix(self, store) -> None:
        result = run_upload(upload(), storage=store)

        assert result.success
        assert result.file is not None
        assert result.file.storage_key.startswith("prescriptions/session-123/")
        assert result.file.storage_key.endswith(".png")
        assert result.file.sha256 == hashlib.sha256(PNG).hexdigest()
        assert result.file.size_bytes == len(PNG)
        assert store.get(result.file.storage_key) == PNG

    def test_image_gets_preview(self, store) -> None:
        result = run_upload(upload(), storage=store)
        assert result.preview is not None
        assert result.preview.startswith("data:image/png;base64,")

    def test_pdf_has_no_preview(self, store) -> None:
        result = run_upload(upload(b"%PDF-1.7", "application/pdf", filename="rx.pdf"), storage=store)
        assert result.success
        assert result.preview is None

    def test_reads_file_objects(self, store) -> None:
        result = run_upload(upload(io.BytesIO(PNG)), storage=store)
        assert result.success
        assert result.file is not None and result.file.size_bytes == len(PNG)

    def test_rejects_bad_type_without_storing(self, store) -> None:
        result = run_upload(upload(b"GIF89a", "image/gif"), storage=store)
        assert not result.success
        assert result.errors[0].code == "invalid_mime_type"
        assert store.objects == {}

    def test_rejects_oversize(self, store) -> None:
        big = b"\x00" * (5 * 1024 * 1024 + 1)
        result = run_upload(upload(big), storage=store)
        assert result.errors[0].code == "file_too_large"
        assert store.objects == {}

    def test_rejects_path_like_owner(self, store) -> None:
        result = run_upload(upload(owner_key="../other"), storage=store)
        assert result.errors[0].code == "invalid_owner"

    def test_keys_never_reused(self, store) -> None:
        first = run_upload(upload(), storage=store)
        second = run_upload(upload(), storage=store)
        assert first.file is not None and second.file is not None
        assert first.file.storage_key != second.file.storage_key

    def test_storage_failure_is_reported(self, store) -> None:
        store.fail_writes = True
        result = run_upload(upload(), storage=store)
        assert not result.success
        assert result.file is None
        assert [e.code for e in result.errors] == ["persistence_failed"]
        assert store.objects == {}


class TestRunFetch:
    def test_fetch_stored(self, store) -> None:
        stored = run_upload(upload(), storage=store)
        assert stored.file is not None
        result = run_fetch(FetchPrescriptionInput(storage_key=stored.file.storage_key), storage=store)
        assert result.data == PNG

    def test_missing(self, store) -> None:
        result = run_fetch(FetchPrescriptionInput(storage_key="prescriptions/x/y.png"), storage=store)
        assert result.errors[0].code == "not_found"

    def test_outside_prescriptions_prefix(self, store) -> None:
        store.objects["other/secret"] = (b"x", "text/plain")
        result = run_fetch(FetchPrescriptionInput(storage_key="other/secret"), storage=store)
        assert not result.success


class TestUploadIntoBuilder:
    def test_success_selects_upload_method(self, store) -> None:
        t = upload_into_builder(initial_state(), upload(), storage=store)
        assert t.success
        assert t.configuration.prescription_type == "upload"
        assert t.configuration.prescription_image is not None
        assert t.state.preview is not None

    def test_storage_failure_keeps_state(self, store) -> None:
        store.fail_writes = True
        state = initial_state()
        t = upload_into_builder(state, upload(), storage=store)
        assert t.errors[0].code == "upload_failed"
        assert t.state.pending_upload is None
        assert t.state.uploaded_file is None
        assert t.configuration.has_eyesight is False

    def test_validation_failure_never_touches_storage(self, store) -> None:
        t = upload_into_builder(initial_state(), upload(b"x", "image/gif"), storage=store)
        assert t.errors[0].code == "invalid_mime_type"
        assert store.objects == {}
