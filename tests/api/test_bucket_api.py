"""
End-to-end tests for the HTTP API.

These drive the FastAPI app through TestClient against a real storage
root in tmp_path. Nothing is mocked: the point is that status codes,
headers and bodies line up with what the store did on disk.
"""

from buckets.infrastructure.storage.filesystem import PAYLOAD_SUFFIX, FilesystemObjectStore

PNG = b"\x01\x02\x03"


def put_png(client, bucket="photos", name="a.png", data=PNG, **kwargs):
    return client.put(
        f"/Bucket/{bucket}",
        files={"file": (name, data, "image/png")},
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Object lifecycle
# ---------------------------------------------------------------------------

class TestObjectLifecycle:

    def test_put_get_delete_scenario(self, client):
        """PUT, GET, DELETE, then the object and its bucket are gone."""
        response = put_png(client)
        assert response.status_code == 200
        object_id = response.json()
        assert isinstance(object_id, str)

        response = client.get(f"/Bucket/photos/{object_id}")
        assert response.status_code == 200
        assert response.content == PNG
        assert response.headers["content-type"] == "image/png"
        assert response.headers["x-buckets-object-id"] == object_id
        assert response.headers["x-buckets-object-name"] == "a.png"
        assert response.headers["x-buckets-bucket-name"] == "photos"

        response = client.delete(f"/Bucket/photos/{object_id}")
        assert response.status_code == 200

        response = client.get(f"/Bucket/photos/{object_id}")
        assert response.status_code == 404

        response = client.get("/Bucket/List")
        assert response.status_code == 200
        assert "photos" not in response.json()

    def test_head_returns_headers_only(self, client):
        object_id = put_png(client).json()

        response = client.head(f"/Bucket/photos/{object_id}")

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-length"] == "3"
        assert response.headers["x-buckets-object-id"] == object_id

    def test_head_missing_object(self, client):
        put_png(client)
        assert client.head("/Bucket/photos/nope").status_code == 404

    def test_delete_missing_object(self, client):
        response = client.delete("/Bucket/photos/nope")

        assert response.status_code == 404
        assert response.json()["title"] == "The specified object could not be found"
        assert response.json()["instance"] == "/Bucket/photos/nope"

    def test_listing(self, client):
        first = put_png(client).json()
        second = put_png(client, name="b.png").json()
        put_png(client, bucket="other")

        assert client.get("/Bucket/List").json() == ["other", "photos"]
        assert client.get("/Bucket/photos/List").json() == sorted([first, second])

    def test_list_missing_bucket(self, client):
        response = client.get("/Bucket/nothing/List")

        assert response.status_code == 404
        assert response.json()["status"] == 404

    def test_list_buckets_before_any_upload(self, client, storage_root):
        assert not storage_root.exists()
        assert client.get("/Bucket/List").json() == []

    def test_name_with_non_ascii_characters(self, client):
        object_id = put_png(client, params={"nameOverride": "résumé 1.png"}).json()

        response = client.head(f"/Bucket/photos/{object_id}")

        assert response.headers["x-buckets-object-name"] == "r%C3%A9sum%C3%A9%201.png"

    def test_ascii_names_are_encoded_too(self, client):
        object_id = put_png(client, name="photo 1.png").json()

        response = client.get(f"/Bucket/photos/{object_id}")

        assert response.headers["x-buckets-object-name"] == "photo%201.png"


# ---------------------------------------------------------------------------
# Upload shapes
# ---------------------------------------------------------------------------

class TestUpload:

    def test_raw_body_uses_content_type(self, client, storage_root):
        response = client.put(
            "/Bucket/docs",
            params={"nameOverride": "notes.txt"},
            content=b"hello",
            headers={"Content-Type": "text/plain"},
        )
        object_id = response.json()

        stored = FilesystemObjectStore(storage_root).get_object("docs", object_id)
        assert stored.data == b"hello"
        assert stored.metadata.mime_type == "text/plain"
        assert stored.metadata.name == "notes.txt"

    def test_overrides_win_over_upload(self, client, storage_root):
        object_id = put_png(
            client,
            params={"nameOverride": "renamed.bin", "mimeOverride": "application/x-test"},
        ).json()

        metadata, _ = FilesystemObjectStore(storage_root).get_metadata("photos", object_id)
        assert metadata.name == "renamed.bin"
        assert metadata.mime_type == "application/x-test"

    def test_defaults_without_name_or_type(self, client, storage_root):
        """No name anywhere gets a UUID; no type gets octet-stream."""
        object_id = client.put("/Bucket/raw", content=b"\x00\xff").json()

        metadata, size = FilesystemObjectStore(storage_root).get_metadata("raw", object_id)
        assert metadata.mime_type == "application/octet-stream"
        assert len(metadata.name) == 36
        assert size == 2

    def test_multipart_without_file_part(self, client):
        response = client.put("/Bucket/photos", data={"something": "else"}, files={"other": ("x", b"x")})

        assert response.status_code == 400
        assert response.json()["error"] is True

    def test_multipart_without_boundary(self, client, storage_root):
        response = client.put(
            "/Bucket/photos",
            content=b"not really multipart",
            headers={"Content-Type": "multipart/form-data"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] is True
        assert "multipart" in body["message"]
        assert not storage_root.exists()

    def test_upload_too_large(self, make_client):
        client = make_client(max_upload_size_mb=1)

        response = client.put("/Bucket/big", content=b"x" * (1024 * 1024 + 1))

        assert response.status_code == 413
        assert client.get("/Bucket/List").json() == []


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestValidation:
    """Unsafe names are a 400 with a {message, error} body on every route."""

    def assert_bad_request(self, response):
        assert response.status_code == 400
        body = response.json()
        assert body["error"] is True
        assert "invalid characters" in body["message"]

    def test_bucket_with_traversal_sequence(self, client, storage_root):
        self.assert_bad_request(client.get("/Bucket/a..b/List"))
        self.assert_bad_request(client.get("/Bucket/a..b/some-id"))
        self.assert_bad_request(client.delete("/Bucket/a..b/some-id"))
        self.assert_bad_request(put_png(client, bucket="a..b"))

        assert not storage_root.exists()

    def test_object_id_with_traversal_sequence(self, client):
        put_png(client)

        self.assert_bad_request(client.get("/Bucket/photos/x..y"))
        self.assert_bad_request(client.delete("/Bucket/photos/x..y"))
        assert client.head("/Bucket/photos/x..y").status_code == 400

    def test_blank_mime_override_falls_back(self, client):
        """A blank override is ignored rather than rejected."""
        response = put_png(client, params={"mimeOverride": "  "})
        assert response.status_code == 200


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class TestAuthentication:

    def test_create_without_header_is_forbidden(self, make_client, storage_root):
        client = make_client(require_auth_object_create=True, authentication_keys="secret")

        response = put_png(client)

        assert response.status_code == 403
        assert response.json() == {"message": "No Authorization header provided", "error": True}
        assert not storage_root.exists()

    def test_wrong_scheme_and_wrong_token(self, make_client):
        client = make_client(require_auth_object_create=True, authentication_keys="secret")

        not_bearer = put_png(client, headers={"Authorization": "Basic secret"})
        wrong_token = put_png(client, headers={"Authorization": "Bearer nope"})

        assert not_bearer.status_code == 403
        assert "not a bearer token" in not_bearer.json()["message"]
        assert wrong_token.status_code == 403
        assert "invalid" in wrong_token.json()["message"]

    def test_valid_token_is_accepted(self, make_client):
        client = make_client(require_auth_object_create=True, authentication_keys="one,secret")

        response = put_png(client, headers={"Authorization": "Bearer secret"})

        assert response.status_code == 200

    def test_requirements_apply_per_operation(self, make_client):
        """Only the gated kind is refused; other operations stay open."""
        client = make_client(require_auth_object_delete=True, authentication_keys="secret")
        object_id = put_png(client).json()

        assert client.get(f"/Bucket/photos/{object_id}").status_code == 200
        assert client.delete(f"/Bucket/photos/{object_id}").status_code == 403
        assert client.get(f"/Bucket/photos/{object_id}").status_code == 200

    def test_auth_is_checked_before_validation(self, make_client):
        """A denied request never reaches the store, even with a bad name."""
        client = make_client(require_auth_object_list=True, authentication_keys="secret")

        assert client.get("/Bucket/a..b/List").status_code == 403

    def test_authentication_requirements_endpoint(self, make_client):
        client = make_client(
            require_auth_bucket_list=True,
            require_auth_object_read=True,
            authentication_keys="secret",
        )

        response = client.get("/System/AuthenticationRequirements")

        assert response.status_code == 200
        assert response.json() == {
            "BucketList": True,
            "ObjectList": False,
            "ObjectRead": True,
            "ObjectCreate": False,
            "ObjectDelete": False,
        }


# ---------------------------------------------------------------------------
# Server faults
# ---------------------------------------------------------------------------

class TestServerFaults:

    def test_integrity_fault_is_a_generic_500(self, client, storage_root):
        object_id = put_png(client).json()
        (storage_root / "photos" / f"{object_id}{PAYLOAD_SUFFIX}").unlink()

        for response in (
            client.get(f"/Bucket/photos/{object_id}"),
            client.delete(f"/Bucket/photos/{object_id}"),
        ):
            assert response.status_code == 500
            assert response.json() == {"message": "Internal server error", "error": True}

    def test_storage_failure_is_a_generic_500(self, client, storage_root):
        storage_root.write_text("not a directory")

        response = client.get("/Bucket/List")

        assert response.status_code == 500
        assert response.json()["error"] is True


# ---------------------------------------------------------------------------
# Health and docs
# ---------------------------------------------------------------------------

class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_with_creatable_root(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_readiness_reports_bad_configuration(self, make_client):
        client = make_client(require_auth_object_read=True)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_docs_can_be_disabled(self, make_client):
        assert make_client(enable_docs=False).get("/docs").status_code == 404
        assert make_client(enable_docs=True).get("/docs").status_code == 200
