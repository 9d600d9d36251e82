"""Tests for the crates.io version oracle."""

import json
from unittest.mock import MagicMock, patch

import pytest
import semantic_version

from common.errors import RegistryError
from constants import Constants
from registry.crates_io import bump_major, get_current_version, next_version


def _response(status_code, body=None):
    res = MagicMock()
    res.status_code = status_code
    res.text = json.dumps(body) if body is not None else ""
    return res


class TestGetCurrentVersion:
    """Test max_version lookups."""

    @patch('registry.crates_io.safe_get')
    def test_reads_max_version(self, mock_safe_get):
        """Test a 200 response yields crate.max_version."""
        mock_safe_get.return_value = _response(200, {"crate": {"id": "rustc-ap-syntax", "max_version": "73.0.0"}})

        version = get_current_version("rustc-ap-syntax")

        assert version == semantic_version.Version("73.0.0")
        called_url = mock_safe_get.call_args[0][0]
        assert called_url == Constants.REGISTRY_API_URL + "rustc-ap-syntax"

    @patch('registry.crates_io.safe_get')
    def test_not_found_is_zero(self, mock_safe_get):
        """Test a 404 is handled as version 0.0.0."""
        mock_safe_get.return_value = _response(404, {"errors": [{"detail": "Not Found"}]})
        assert get_current_version("rustc-ap-syntax") == semantic_version.Version("0.0.0")

    @patch('registry.crates_io.safe_get')
    def test_unexpected_status_is_fatal(self, mock_safe_get):
        """Test any other status raises RegistryError."""
        mock_safe_get.return_value = _response(503)
        with pytest.raises(RegistryError) as excinfo:
            get_current_version("rustc-ap-syntax")
        assert excinfo.value.status_code == 503

    @patch('registry.crates_io.safe_get')
    def test_body_without_max_version(self, mock_safe_get):
        """Test a 200 body missing crate.max_version."""
        mock_safe_get.return_value = _response(200, {"crate": {}})
        with pytest.raises(RegistryError):
            get_current_version("rustc-ap-syntax")

    @patch('registry.crates_io.safe_get')
    def test_body_not_json(self, mock_safe_get):
        """Test a 200 body that is not JSON."""
        res = _response(200)
        res.text = "<html>"
        mock_safe_get.return_value = res
        with pytest.raises(RegistryError):
            get_current_version("rustc-ap-syntax")

    @patch('registry.crates_io.safe_get')
    def test_custom_registry_url(self, mock_safe_get):
        """Test the base URL can be overridden."""
        mock_safe_get.return_value = _response(404)
        get_current_version("x", url="http://localhost:8000/api/v1/crates/")
        assert mock_safe_get.call_args[0][0] == "http://localhost:8000/api/v1/crates/x"


class TestNextVersion:
    """Test the next generation version."""

    @patch('registry.crates_io.safe_get')
    def test_bumps_major_only(self, mock_safe_get):
        """Test M.N.P becomes (M+1).N.P."""
        mock_safe_get.return_value = _response(200, {"crate": {"max_version": "12.3.4"}})
        assert str(next_version("rustc-ap-syntax")) == "13.3.4"

    @patch('registry.crates_io.safe_get')
    def test_first_publication(self, mock_safe_get):
        """Test a never-published sentinel yields 1.0.0."""
        mock_safe_get.return_value = _response(404)
        assert str(next_version("rustc-ap-syntax")) == "1.0.0"

    @patch('registry.crates_io.safe_get')
    def test_default_sentinel(self, mock_safe_get):
        """Test the sentinel defaults to <prefix>-<root>."""
        mock_safe_get.return_value = _response(404)
        next_version()
        assert mock_safe_get.call_args[0][0].endswith(
            f"{Constants.PREFIX}-{Constants.ROOT_PACKAGE}"
        )

    def test_bump_keeps_prerelease(self):
        """Test tags on the current version pass through."""
        assert str(bump_major(semantic_version.Version("1.2.3-alpha.1"))) == "2.2.3-alpha.1"
