"""Tests for the build driver against real child processes."""

import io
import logging

import pytest

from conftest import open_fds, write_script
from errors import BuildToolFailed
from kbuild.driver import SPAWN_FAILED, BuildDriver
from kbuild.sinks import CaptureSink, OutputSink, PassThroughSink
from versioning.models import SemanticVersion


def stub(tmp_path, body):
    return BuildDriver(str(write_script(tmp_path, "make", body)))


class TestRun:
    """Success and failure reporting."""

    def test_arguments_and_working_directory(self, tmp_path):
        driver = stub(tmp_path, """\
            #!/bin/sh
            printf '%s|' "$@"
            """)
        sink = CaptureSink()

        driver.run(tmp_path / "linux-5.15.3", ["modules_install", "install"], sink)

        assert sink.text() == f"-C|{tmp_path / 'linux-5.15.3'}|modules_install|install|"

    def test_output_delivered_in_order_before_return(self, tmp_path):
        driver = stub(tmp_path, """\
            #!/bin/sh
            for i in 1 2 3 4 5; do echo "line $i"; done
            """)
        sink = CaptureSink()

        driver.run(tmp_path, ["all"], sink)

        assert sink.closed
        assert sink.text().splitlines() == [f"line {i}" for i in range(1, 6)]

    def test_version_query_parses(self, tmp_path):
        driver = stub(tmp_path, """\
            #!/bin/sh
            printf '5.15.3\\n'
            """)
        sink = CaptureSink()

        driver.run(tmp_path, ["-is", "kernelversion"], sink)

        assert SemanticVersion(sink.text()) == SemanticVersion("5.15.3")

    def test_output_larger_than_pipe_buffer(self, tmp_path):
        driver = stub(tmp_path, """\
            #!/bin/sh
            head -c 1048576 /dev/zero
            """)
        sink = CaptureSink()

        driver.run(tmp_path, ["all"], sink)

        assert len(sink.data) == 1048576

    @pytest.mark.parametrize("code", [1, 2, 42])
    def test_nonzero_exit_carries_code(self, tmp_path, code):
        driver = stub(tmp_path, f"""\
            #!/bin/sh
            echo "partial output"
            exit {code}
            """)
        sink = CaptureSink()

        with pytest.raises(BuildToolFailed) as exc_info:
            driver.run(tmp_path, ["all"], sink)

        assert exc_info.value.exit_code == code
        assert exc_info.value.targets == ("all",)
        assert sink.text() == "partial output\n"

    def test_killed_by_signal(self, tmp_path):
        driver = stub(tmp_path, """\
            #!/bin/sh
            echo "before"
            kill -9 $$
            """)
        sink = CaptureSink()

        with pytest.raises(BuildToolFailed) as exc_info:
            driver.run(tmp_path, ["all"], sink)

        assert exc_info.value.exit_code == -9
        assert "signal 9" in str(exc_info.value)
        assert sink.text() == "before\n"

    def test_missing_tool(self, tmp_path):
        driver = BuildDriver(str(tmp_path / "no-such-make"))

        with pytest.raises(BuildToolFailed) as exc_info:
            driver.run(tmp_path, ["all"], CaptureSink())

        assert exc_info.value.exit_code == SPAWN_FAILED

    def test_default_sink_passes_through(self, tmp_path, monkeypatch):
        driver = stub(tmp_path, """\
            #!/bin/sh
            echo "hello"
            """)
        stream = io.BytesIO()
        monkeypatch.setattr(PassThroughSink, "_target", lambda self: stream)

        driver.run(tmp_path, ["all"])

        assert stream.getvalue() == b"hello\n"

    def test_sink_error_is_raised_after_child_exits(self, tmp_path):
        driver = stub(tmp_path, """\
            #!/bin/sh
            head -c 262144 /dev/zero
            """)

        class Broken(OutputSink):
            def write(self, chunk):
                raise ValueError("sink broke")

        with pytest.raises(ValueError, match="sink broke"):
            driver.run(tmp_path, ["all"], Broken())

    def test_exit_status_wins_over_sink_error(self, tmp_path, caplog):
        driver = stub(tmp_path, """\
            #!/bin/sh
            echo "output"
            exit 3
            """)

        class Broken(OutputSink):
            def write(self, chunk):
                raise ValueError("sink broke")

        caplog.set_level(logging.DEBUG, logger="kbuild.driver")
        with pytest.raises(BuildToolFailed) as exc_info:
            driver.run(tmp_path, ["all"], Broken())

        assert exc_info.value.exit_code == 3
        assert "sink broke" in caplog.text


class TestDescriptors:
    """Pipe descriptors are released on every path."""

    @pytest.fixture(autouse=True)
    def _needs_proc(self):
        if open_fds() is None:
            pytest.skip("needs /proc/self/fd")

    def test_success_closes_pipe(self, tmp_path):
        driver = stub(tmp_path, "#!/bin/sh\necho ok\n")
        before = open_fds()

        driver.run(tmp_path, ["all"], CaptureSink())

        assert open_fds() == before

    def test_failure_closes_pipe(self, tmp_path):
        driver = stub(tmp_path, "#!/bin/sh\nexit 3\n")
        before = open_fds()

        with pytest.raises(BuildToolFailed):
            driver.run(tmp_path, ["all"], CaptureSink())

        assert open_fds() == before

    def test_spawn_failure_closes_pipe(self, tmp_path):
        driver = BuildDriver(str(tmp_path / "missing"))
        before = open_fds()

        with pytest.raises(BuildToolFailed):
            driver.run(tmp_path, ["all"], CaptureSink())

        assert open_fds() == before
