"""Tests for the sofle-build exception hierarchy."""

import pytest

from sofle_build.core.errors import (
    BuildError,
    ConfigError,
    DockerError,
    PrerequisiteError,
    SofleBuildError,
    create_docker_error,
)


@pytest.mark.parametrize(
    "error_class", [ConfigError, PrerequisiteError, DockerError, BuildError]
)
def test_errors_share_base_class(error_class):
    error = error_class("something went wrong")

    assert isinstance(error, SofleBuildError)
    assert str(error) == "something went wrong"
    assert error.context == {}


def test_hint_from_context():
    error = PrerequisiteError("Docker is not installed.", {"hint": "brew install"})

    assert error.hint == "brew install"
    assert ConfigError("no hint").hint is None


def test_context_is_copied():
    context = {"path": "config"}
    error = ConfigError("missing", context)
    context["path"] = "changed"

    assert error.context == {"path": "config"}


def test_docker_error_records_command():
    error = DockerError("pull failed", command="docker pull img", context={"x": 1})

    assert error.command == "docker pull img"
    assert error.context == {"x": 1, "command": "docker pull img"}


def test_create_docker_error_with_cause():
    cause = FileNotFoundError("docker")

    error = create_docker_error("not found", "docker info", cause, {"image": "img"})

    assert isinstance(error, DockerError)
    assert error.command == "docker info"
    assert error.context["cause_type"] == "FileNotFoundError"
    assert error.context["image"] == "img"


def test_create_docker_error_without_cause():
    error = create_docker_error("unavailable", None, None)

    assert error.command is None
    assert "cause" not in error.context
