"""
Unit tests for the S3 object store gateway
"""
import pytest

from homerecall.core.exceptions import (
    DeleteError,
    DownloadError,
    InvalidPathError,
    StorageError,
    UploadError,
    ValidationError,
)
from homerecall.services.storage.object_store import ObjectStoreGateway, recall_log_prefix


FIVE_MB = 5 * 1024 * 1024


@pytest.mark.unit
class TestGenerateKey:

    def test_key_keeps_prefix_and_extension(self, recall_gateway):
        key = recall_gateway.generate_key("recall_cases/c1/logs/l1", "Front Door.PNG")
        assert key.startswith("recall_cases/c1/logs/l1/")
        assert key.endswith(".png")

    def test_key_defaults_to_jpg(self, recall_gateway):
        assert recall_gateway.generate_key("abc", None).endswith(".jpg")
        assert recall_gateway.generate_key("abc", "no_extension").endswith(".jpg")

    def test_keys_are_unique(self, recall_gateway):
        keys = {recall_gateway.generate_key("abc", "a.jpg") for _ in range(50)}
        assert len(keys) == 50

    def test_recall_log_prefix(self):
        assert recall_log_prefix("c1", "l1") == "recall_cases/c1/logs/l1"


@pytest.mark.unit
class TestUpload:

    def test_upload_at_size_limit_succeeds(self, recall_gateway, s3_client):
        path = recall_gateway.upload(b"x" * FIVE_MB, "p/exact.jpg", "image/jpeg", "exact.jpg")

        assert path == "p/exact.jpg"
        assert s3_client.keys(recall_gateway.bucket_name) == ["p/exact.jpg"]

    def test_upload_one_byte_over_limit_is_rejected(self, recall_gateway, s3_client):
        with pytest.raises(ValidationError) as exc:
            recall_gateway.upload(b"x" * (FIVE_MB + 1), "p/big.jpg", "image/jpeg", "big.jpg")

        assert exc.value.message == "big.jpg is too large (max 5MB)"
        assert s3_client.keys(recall_gateway.bucket_name) == []

    def test_non_image_is_rejected_before_network(self, recall_gateway, s3_client, mocker):
        spy = mocker.spy(s3_client, "put_object")

        with pytest.raises(ValidationError):
            recall_gateway.upload(b"%PDF", "p/doc.pdf", "application/pdf", "doc.pdf")

        spy.assert_not_called()

    def test_showing_bucket_only_accepts_jpg_and_png(self, showing_gateway):
        with pytest.raises(ValidationError) as exc:
            showing_gateway.upload(b"GIF89a", "s/anim.gif", "image/gif", "anim.gif")
        assert exc.value.message == "anim.gif must be JPG or PNG format"

    def test_existing_object_is_never_overwritten(self, recall_gateway, s3_client):
        recall_gateway.upload(b"first", "p/one.jpg", "image/jpeg")

        with pytest.raises(UploadError):
            recall_gateway.upload(b"second", "p/one.jpg", "image/jpeg")

        assert s3_client.objects[(recall_gateway.bucket_name, "p/one.jpg")][0] == b"first"

    def test_transport_failure_raises_upload_error(self, recall_gateway, s3_client):
        s3_client.failing_keys.add("p/broken.jpg")

        with pytest.raises(UploadError) as exc:
            recall_gateway.upload(b"data", "p/broken.jpg", "image/jpeg")

        assert exc.value.cause is not None

    def test_blank_path_is_rejected(self, recall_gateway):
        with pytest.raises(InvalidPathError):
            recall_gateway.upload(b"data", "   ", "image/jpeg", "a.jpg")


@pytest.mark.unit
class TestSignedUrls:

    def test_signed_url_uses_policy_ttl(self, recall_gateway, showing_gateway):
        assert "X-Amz-Expires=600" in recall_gateway.get_signed_url("p/a.jpg")
        assert "X-Amz-Expires=3600" in showing_gateway.get_signed_url("s/a.jpg")

    def test_signed_url_explicit_ttl(self, recall_gateway):
        assert "X-Amz-Expires=60" in recall_gateway.get_signed_url("p/a.jpg", ttl=60)

    @pytest.mark.parametrize("path", ["", "   ", None])
    def test_blank_path_raises_invalid_path(self, recall_gateway, path):
        with pytest.raises(InvalidPathError) as exc:
            recall_gateway.get_signed_url(path)
        assert exc.value.message == "Invalid storage path provided"

    def test_batch_skips_failures(self, recall_gateway, s3_client):
        s3_client.failing_keys.add("p/bad.jpg")
        paths = ["p/1.jpg", "p/2.jpg", "", "p/3.jpg", "p/bad.jpg"]

        urls = recall_gateway.get_signed_urls(paths)

        assert set(urls) == {"p/1.jpg", "p/2.jpg", "p/3.jpg"}

    def test_batch_with_one_blank_path_returns_four(self, recall_gateway):
        urls = recall_gateway.get_signed_urls(["a.jpg", "b.jpg", "", "c.jpg", "d.jpg"])
        assert len(urls) == 4


@pytest.mark.unit
class TestDownload:

    def test_download_returns_bytes(self, recall_gateway):
        recall_gateway.upload(b"\xff\xd8img", "p/a.jpg", "image/jpeg")
        assert recall_gateway.download("p/a.jpg") == b"\xff\xd8img"

    def test_missing_object_is_404(self, recall_gateway):
        with pytest.raises(DownloadError) as exc:
            recall_gateway.download("p/missing.jpg")
        assert exc.value.status_code == 404

    def test_blank_path_is_400(self, recall_gateway):
        with pytest.raises(DownloadError) as exc:
            recall_gateway.download("")
        assert exc.value.status_code == 400

    def test_empty_body_is_an_error(self, recall_gateway, s3_client):
        s3_client.objects[(recall_gateway.bucket_name, "p/empty.jpg")] = (b"", "image/jpeg")

        with pytest.raises(DownloadError) as exc:
            recall_gateway.download("p/empty.jpg")
        assert exc.value.message == "No data returned from photo download"


@pytest.mark.unit
class TestRemove:

    def test_remove_missing_object_succeeds(self, recall_gateway):
        recall_gateway.remove("p/never-existed.jpg")

    def test_remove_deletes_object(self, recall_gateway, s3_client):
        recall_gateway.upload(b"data", "p/a.jpg", "image/jpeg")
        recall_gateway.remove("p/a.jpg")
        assert s3_client.keys(recall_gateway.bucket_name) == []

    def test_remove_failure_raises(self, recall_gateway, s3_client):
        s3_client.failing_keys.add("p/a.jpg")
        with pytest.raises(DeleteError):
            recall_gateway.remove("p/a.jpg")

    def test_remove_many_batches_by_thousand(self, recall_gateway, s3_client):
        keys = [f"p/{i}.jpg" for i in range(1500)]
        for key in keys:
            s3_client.objects[(recall_gateway.bucket_name, key)] = (b"x", "image/jpeg")

        removed = recall_gateway.remove_many(keys + [""])

        assert removed == 1500
        assert s3_client.delete_objects_calls == 2
        assert s3_client.keys(recall_gateway.bucket_name) == []

    def test_remove_many_reports_failed_keys(self, recall_gateway, s3_client):
        s3_client.failing_keys.add("p/stuck.jpg")
        with pytest.raises(DeleteError) as exc:
            recall_gateway.remove_many(["p/ok.jpg", "p/stuck.jpg"])
        assert "p/stuck.jpg" in exc.value.message

    def test_remove_prefix_only_touches_prefix(self, recall_gateway, s3_client):
        bucket = recall_gateway.bucket_name
        for key in ["recall_cases/a/logs/1/x.jpg", "recall_cases/a/logs/2/y.jpg", "recall_cases/ab/z.jpg"]:
            s3_client.objects[(bucket, key)] = (b"x", "image/jpeg")

        removed = recall_gateway.remove_prefix("recall_cases/a")

        assert removed == 2
        assert s3_client.keys(bucket) == ["recall_cases/ab/z.jpg"]

    def test_list_under_prefix(self, recall_gateway, s3_client):
        bucket = recall_gateway.bucket_name
        s3_client.objects[(bucket, "x/1.jpg")] = (b"abc", "image/jpeg")
        s3_client.objects[(bucket, "x/2.jpg")] = (b"de", "image/jpeg")

        listed = recall_gateway.list_under_prefix("x")

        assert sorted(o["key"] for o in listed) == ["x/1.jpg", "x/2.jpg"]
        assert sorted(o["size"] for o in listed) == [2, 3]


@pytest.mark.unit
class TestCheckBucket:

    def test_reachable_bucket(self, recall_gateway):
        assert recall_gateway.check_bucket() == {
            "bucket_name": recall_gateway.bucket_name,
            "accessible": True,
        }

    def test_missing_bucket(self, s3_client, recall_gateway):
        s3_client.missing_buckets.add(recall_gateway.bucket_name)
        with pytest.raises(StorageError) as exc:
            recall_gateway.check_bucket()
        assert "Bucket not found" in exc.value.message

    def test_gateway_is_bound_to_bucket(self, s3_client, recall_gateway):
        other = ObjectStoreGateway(s3_client, "other-bucket", recall_gateway.policy)
        recall_gateway.upload(b"data", "p/a.jpg", "image/jpeg")
        assert s3_client.keys("other-bucket") == []
        assert other.get_signed_urls(["p/a.jpg"])["p/a.jpg"].startswith("https://other-bucket.")
