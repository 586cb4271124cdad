"""Tests for temporary-root resolvers."""

from __future__ import annotations

import os
import tempfile

import pytest

from pathkeep.errors import BoundaryViolation
from pathkeep.resolver import PathResolver
from pathkeep.temp import TempResolver


class TestCreateTemp:
    def test_directories_created_and_config_copied(self, strict_resolver):
        with strict_resolver.create_temp() as temp:
            assert isinstance(temp, TempResolver)
            assert temp.temp_root != strict_resolver.root
            assert temp.root == temp.temp_root
            assert temp.strict
            assert os.path.isdir(temp.path_for("config"))
            assert os.path.isdir(temp.path_for("logs"))

    def test_skip_directory_creation(self, resolver):
        with resolver.create_temp(create_dirs=False) as temp:
            assert os.listdir(temp.temp_root) == []

    def test_fixtures_written(self, resolver):
        fixtures = {"config/db.json": '{"url": "sqlite://"}', "data/blob.bin": b"\x00\xff"}
        with resolver.create_temp(fixtures=fixtures) as temp:
            assert temp.files.read_text("config/db.json") == '{"url": "sqlite://"}'
            assert temp.files.read_bytes("data/blob.bin") == b"\x00\xff"

    def test_prefix(self, resolver):
        with resolver.create_temp(prefix="custom-") as temp:
            assert os.path.basename(temp.temp_root).startswith("custom-")

    def test_prefix_from_environment(self, resolver, monkeypatch):
        monkeypatch.setenv("PK_TEMP_PREFIX", "envprefix-")
        with resolver.create_temp() as temp:
            assert os.path.basename(temp.temp_root).startswith("envprefix-")

    def test_templates_are_not_copied(self, root):
        resolver = PathResolver(root, templates={"env": lambda: "prod"})
        with resolver.create_temp() as temp:
            assert "env" not in temp.templates.template_names()

    def test_original_root_untouched(self, resolver, root):
        with resolver.create_temp(fixtures={"a.txt": "x"}):
            pass
        assert os.listdir(root) == []


class TestCleanup:
    def test_cleanup_removes_root(self, resolver):
        temp = resolver.create_temp(fixtures={"a/b.txt": "x"})
        temp_root = temp.temp_root
        assert os.path.isdir(temp_root)
        temp.cleanup()
        assert temp.is_cleaned_up
        assert not os.path.exists(temp_root)

    def test_cleanup_is_idempotent(self, resolver):
        temp = resolver.create_temp()
        temp.cleanup()
        temp.cleanup()
        assert temp.is_cleaned_up

    def test_context_manager_cleans_up_on_error(self, resolver):
        with pytest.raises(RuntimeError):
            with resolver.create_temp() as temp:
                temp_root = temp.temp_root
                raise RuntimeError("boom")
        assert not os.path.exists(temp_root)

    def test_escaping_fixture_rejected_and_root_removed(self, resolver, monkeypatch):
        created = []
        real_mkdtemp = tempfile.mkdtemp

        def tracking_mkdtemp(*args, **kwargs):
            path = real_mkdtemp(*args, **kwargs)
            created.append(path)
            return path

        monkeypatch.setattr("tempfile.mkdtemp", tracking_mkdtemp)
        with pytest.raises(BoundaryViolation):
            resolver.create_temp(fixtures={"../escape.txt": "x"})
        assert created
        assert not os.path.exists(created[0])

    def test_lifecycle_is_logged(self, root, memory_logger, log_stream):
        resolver = PathResolver(root, logger=memory_logger)
        with resolver.create_temp():
            pass
        messages = [line for line in log_stream.getvalue().splitlines() if "temp root" in line]
        assert len(messages) == 2
        assert '"message":"temp root created"' in messages[0]
        assert '"message":"temp root removed"' in messages[1]

    def test_cleanup_forgets_temp_root(self, root, memory_logger):
        resolver = PathResolver(root, logger=memory_logger)
        temp = resolver.create_temp()
        assert temp.temp_root in memory_logger.redactor.roots
        temp.cleanup()
        assert temp.temp_root not in memory_logger.redactor.roots
        assert str(root) in memory_logger.redactor.roots
