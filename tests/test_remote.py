"""Tests for remote directory creation and the working directory stack."""

import pytest

from sftpdeploy.sftp.errors import ErrorKind, PermissionModeError, RemoteDirectoryError
from sftpdeploy.sftp.remote import RemoteDirectoryEnsurer, RemoteWorkingDirectory

from conftest import FakeSFTPChannel


class TestRemoteDirectoryEnsurer:
    """Tests for RemoteDirectoryEnsurer."""

    def test_creates_missing_directory(self, channel) -> None:
        """Should mkdir and chmod a directory that does not exist."""
        ensurer = RemoteDirectoryEnsurer(0o750)

        created = ensurer.ensure(channel, "/srv/app")

        assert created is True
        assert channel.calls == [
            ("stat", "/srv/app"),
            ("mkdir", "/srv/app"),
            ("chmod", "/srv/app", 0o750),
        ]

    def test_second_ensure_is_noop(self, channel) -> None:
        """Should only stat once the directory exists."""
        ensurer = RemoteDirectoryEnsurer(0o755)
        ensurer.ensure(channel, "/srv/app")
        channel.calls.clear()

        created = ensurer.ensure(channel, "/srv/app")

        assert created is False
        assert channel.calls == [("stat", "/srv/app")]

    def test_existing_directory_untouched(self) -> None:
        """Should not mkdir or chmod an existing directory."""
        channel = FakeSFTPChannel(existing={"/srv/app"})

        RemoteDirectoryEnsurer(0o755).ensure(channel, "/srv/app")

        assert channel.ops("mkdir", "chmod") == []

    def test_other_stat_failure_is_fatal(self) -> None:
        """Should never mkdir when stat fails for a reason other than a missing path."""
        denied = PermissionError(13, "Permission denied")
        channel = FakeSFTPChannel(failures={("stat", "/srv/app"): denied})

        with pytest.raises(RemoteDirectoryError) as exc_info:
            RemoteDirectoryEnsurer(0o755).ensure(channel, "/srv/app")

        assert "/srv/app" in str(exc_info.value)
        assert exc_info.value.remote_path == "/srv/app"
        assert exc_info.value.cause is denied
        assert exc_info.value.kind is ErrorKind.REMOTE_DIRECTORY
        assert channel.ops("mkdir") == []

    def test_mkdir_failure(self) -> None:
        """Should translate a failed mkdir."""
        channel = FakeSFTPChannel(failures={("mkdir", "/srv/app"): OSError("Failure")})

        with pytest.raises(RemoteDirectoryError, match="Could not create remote dir '/srv/app'"):
            RemoteDirectoryEnsurer(0o755).ensure(channel, "/srv/app")

        assert channel.ops("chmod") == []

    def test_chmod_failure(self) -> None:
        """Should report a failed chmod as a permission mode error."""
        channel = FakeSFTPChannel(failures={("chmod", "/srv/app"): OSError("Failure")})

        with pytest.raises(PermissionModeError) as exc_info:
            RemoteDirectoryEnsurer(0o755).ensure(channel, "/srv/app")

        assert exc_info.value.remote_path == "/srv/app"

    def test_display_path_used_in_errors(self) -> None:
        """Should name the full path when given a relative one."""
        channel = FakeSFTPChannel(
            cwd="/srv/app",
            failures={("stat", "/srv/app/lib"): PermissionError(13, "Permission denied")},
        )

        with pytest.raises(RemoteDirectoryError, match="/srv/app/lib"):
            RemoteDirectoryEnsurer(0o755).ensure(channel, "lib", display_path="/srv/app/lib")


class TestRemoteWorkingDirectory:
    """Tests for RemoteWorkingDirectory."""

    def test_enter_and_leave(self) -> None:
        """Should cd into the directory and back out with '..'."""
        channel = FakeSFTPChannel(cwd="/srv/app", existing={"/srv/app/lib"})
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        with cwd.enter("lib") as target:
            assert target == "/srv/app/lib"
            assert cwd.depth == 1
            assert channel.cwd == "/srv/app/lib"

        assert cwd.depth == 0
        assert channel.cwd == "/srv/app"
        assert channel.ops("cd") == [("cd", "lib"), ("cd", "..")]

    def test_nested_current(self) -> None:
        """Should render pushed names below the base."""
        channel = FakeSFTPChannel(cwd="/srv", existing={"/srv/a", "/srv/a/b"})
        cwd = RemoteWorkingDirectory(channel, "/srv")

        with cwd.enter("a"):
            with cwd.enter("b"):
                assert cwd.current == "/srv/a/b"
                assert cwd.path_of("c") == "/srv/a/b/c"

        assert cwd.current == "/srv"

    def test_restores_on_failure(self) -> None:
        """Should step back out when the block raises."""
        channel = FakeSFTPChannel(cwd="/srv/app", existing={"/srv/app/lib"})
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        with pytest.raises(RuntimeError):
            with cwd.enter("lib"):
                raise RuntimeError("boom")

        assert cwd.depth == 0
        assert channel.cwd == "/srv/app"

    def test_in_flight_failure_wins_over_cd_out_failure(self) -> None:
        """Should propagate the original failure if cd .. also fails."""
        channel = FakeSFTPChannel(
            cwd="/srv/app",
            existing={"/srv/app/lib"},
            failures={("cd", "/srv/app"): OSError("Failure")},
        )
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        with pytest.raises(RuntimeError, match="boom"):
            with cwd.enter("lib"):
                raise RuntimeError("boom")

        assert cwd.depth == 0

    def test_cd_out_failure_raised_without_other_failure(self) -> None:
        """Should raise a failed cd .. when nothing else went wrong."""
        channel = FakeSFTPChannel(
            cwd="/srv/app",
            existing={"/srv/app/lib"},
            failures={("cd", "/srv/app"): OSError("Failure")},
        )
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        with pytest.raises(RemoteDirectoryError, match="Could not CD out of '/srv/app/lib'"):
            with cwd.enter("lib"):
                pass

    def test_enter_failure_does_not_push(self) -> None:
        """Should not push or cd .. when the directory cannot be entered."""
        channel = FakeSFTPChannel(cwd="/srv/app")
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        with pytest.raises(RemoteDirectoryError, match="Could not CD to '/srv/app/missing'"):
            with cwd.enter("missing"):
                pass

        assert cwd.depth == 0
        assert ("cd", "..") not in channel.calls

    def test_change_to_base(self) -> None:
        """Should cd to the base path."""
        channel = FakeSFTPChannel(existing={"/srv/app"})
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        cwd.change_to_base()

        assert channel.cwd == "/srv/app"
        assert channel.calls == [("cd", "/srv/app")]

    def test_reanchors_when_step_out_fails(self, caplog) -> None:
        """Should return to the parent with an absolute cd when '..' fails."""
        channel = FakeSFTPChannel(
            cwd="/srv/app",
            existing={"/srv/app/lib"},
            failures={("cd", ".."): [OSError("Failure")]},
        )
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        with cwd.enter("lib"):
            pass

        assert cwd.depth == 0
        assert channel.cwd == "/srv/app"
        assert channel.ops("cd") == [("cd", "lib"), ("cd", ".."), ("cd", "/srv/app")]
        assert "returned to '/srv/app'" in caplog.text

    def test_reanchors_after_failure_in_block(self) -> None:
        """Should restore the parent even when both the block and '..' fail."""
        channel = FakeSFTPChannel(
            cwd="/srv/app",
            existing={"/srv/app/lib"},
            failures={("cd", ".."): [OSError("Failure")]},
        )
        cwd = RemoteWorkingDirectory(channel, "/srv/app")

        with pytest.raises(RuntimeError, match="boom"):
            with cwd.enter("lib"):
                raise RuntimeError("boom")

        assert channel.cwd == "/srv/app"

    def test_change_to_base_pins_absolute_path(self) -> None:
        """Should remember the server's absolute form of a relative base."""
        channel = FakeSFTPChannel(cwd="/home/deploy", existing={"/home/deploy/site"})
        cwd = RemoteWorkingDirectory(channel, "site")

        cwd.change_to_base()

        assert cwd.base == "/home/deploy/site"
        assert cwd.path_of("lib") == "/home/deploy/site/lib"
