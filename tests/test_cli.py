"""Tests for CLI scripts."""

import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Optional

# Project paths
project_root = Path(__file__).parent.parent
scripts_dir = project_root / "scripts"
script = scripts_dir / "remove_background.py"


def _run(*args: str, env_overrides: Optional[dict] = None) -> subprocess.CompletedProcess:
    env = {k: v for k, v in os.environ.items() if k != "CLOUDINARY_URL"}
    env["METRICS_ENABLED"] = "false"
    env.update(env_overrides or {})
    return subprocess.run(
        [sys.executable, str(script), *args],
        capture_output=True,
        text=True,
        env=env,
        cwd=str(project_root),
    )


class TestRemoveBackgroundCLI:
    """Tests for remove_background.py CLI script."""

    def test_help_message(self):
        """Test that --help works."""
        result = _run("--help")

        assert result.returncode == 0
        assert "Remove image backgrounds using Cloudinary AI" in result.stdout
        assert "--url" in result.stdout
        assert "--output-dir" in result.stdout

    def test_missing_required_args(self):
        """Test that missing file arguments returns error."""
        result = _run()

        assert result.returncode != 0
        assert "required" in result.stderr.lower()

    def test_missing_connection_string(self):
        """Test that a missing CLOUDINARY_URL is reported as a configuration error."""
        result = _run("cat.png")

        assert result.returncode == 1
        assert "CLOUDINARY_URL" in result.stdout

    def test_no_valid_images(self):
        """Test that nonexistent inputs are skipped and reported."""
        result = _run("/nonexistent/cat.png", "--url", "cloudinary://k:s@demo")

        assert result.returncode == 1
        assert "Skipping" in result.stdout
        assert "No valid images" in result.stdout

    def test_malformed_connection_string(self):
        """Test that a malformed connection string fails before any request."""
        with tempfile.TemporaryDirectory() as tmpdir:
            image = Path(tmpdir) / "cat.png"
            image.write_bytes(b"x" * 100)

            result = _run(str(image), env_overrides={"CLOUDINARY_URL": "not-a-connection-string"})

        assert result.returncode == 1
        assert "Invalid Cloudinary Secret URL format" in result.stdout
