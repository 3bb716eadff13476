"""
Unit tests for the identification header encoding.
"""

import subprocess
import sys

import pytest

from buckets.core.objects.headers import decode_name, encode_name


class TestNameEncoding:

    @pytest.mark.parametrize("name,encoded", [
        ("a.png", "a.png"),
        ("photo 1.png", "photo%201.png"),
        ("a/b", "a%2Fb"),
        ("100%.png", "100%25.png"),
        ("résumé", "r%C3%A9sum%C3%A9"),
    ])
    def test_encoded_form(self, name, encoded):
        assert encode_name(name) == encoded
        assert decode_name(encoded) == name

    def test_encoded_names_are_latin_1_safe(self):
        encode_name("日本語 ファイル.txt").encode("latin-1")


def test_client_does_not_import_the_server_stack():
    """The client package loads without FastAPI or Starlette."""
    code = (
        "import sys\n"
        "import buckets.infrastructure.client\n"
        "loaded = [m for m in ('fastapi', 'starlette', 'uvicorn') if m in sys.modules]\n"
        "assert not loaded, loaded\n"
    )

    result = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True)

    assert result.returncode == 0, result.stderr
