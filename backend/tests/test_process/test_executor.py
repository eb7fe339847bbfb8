"""
Tests for the process executor

Runs the current Python interpreter as the external command so the tests
work wherever the suite runs.
"""

import asyncio
import sys
import threading

import pytest

from minikube_toolkit.core.exceptions import ExecutionCancelledError, ExternalProcessError
from minikube_toolkit.process.cancellation import CancellationToken
from minikube_toolkit.process.executor import ProcessExecutor, build_environment
from minikube_toolkit.system import LinuxPlatform, WindowsPlatform

from conftest import FakeTaskLogger

PYTHON = sys.executable


class TestBuildEnvironment:
    """Tests for build_environment"""

    def test_overrides_and_removals(self, monkeypatch):
        monkeypatch.setenv("KEEP_ME", "1")
        monkeypatch.setenv("DROP_ME", "1")

        env = build_environment({"ADDED": "yes", "DROP_ME": None})

        assert env["KEEP_ME"] == "1"
        assert env["ADDED"] == "yes"
        assert "DROP_ME" not in env


class TestProcessExecutor:
    """Tests for ProcessExecutor.exec"""

    @pytest.mark.asyncio
    async def test_captures_stdout(self):
        result = await ProcessExecutor().exec(PYTHON, ["-c", "print('v1.34.0')"])

        assert result.stdout.strip() == "v1.34.0"
        assert result.returncode == 0

    @pytest.mark.asyncio
    async def test_passes_environment(self):
        result = await ProcessExecutor().exec(
            PYTHON,
            ["-c", "import os; print(os.environ['MINIKUBE_HOME'])"],
            env={"MINIKUBE_HOME": "/custom/home"},
        )

        assert result.stdout.strip() == "/custom/home"

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises_with_stderr(self):
        with pytest.raises(ExternalProcessError) as exc_info:
            await ProcessExecutor().exec(
                PYTHON, ["-c", "import sys; sys.stderr.write('no such profile'); sys.exit(3)"]
            )

        error = exc_info.value
        assert error.returncode == 3
        assert "no such profile" in error.stderr
        assert "exit code 3" in error.message

    @pytest.mark.asyncio
    async def test_missing_executable_raises(self):
        with pytest.raises(ExternalProcessError) as exc_info:
            await ProcessExecutor().exec("definitely-not-a-minikube-binary", ["version"])

        assert exc_info.value.returncode is None

    @pytest.mark.asyncio
    async def test_task_logger_receives_output(self):
        task_logger = FakeTaskLogger()

        await ProcessExecutor().exec(
            PYTHON,
            ["-c", "import sys; print('one'); print('two'); sys.stderr.write('careful\\n')"],
            task_logger=task_logger,
        )

        assert task_logger.lines == ["one", "two"]
        assert task_logger.warnings == ["careful"]

    @pytest.mark.asyncio
    async def test_already_cancelled_token(self):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(ExecutionCancelledError):
            await ProcessExecutor().exec(PYTHON, ["-c", "print('never')"], token=token)

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="Uses SIGTERM")
    async def test_cancellation_terminates_process(self):
        token = CancellationToken()
        executor = ProcessExecutor(LinuxPlatform())

        task = asyncio.create_task(executor.exec(PYTHON, ["-c", "import time; time.sleep(30)"], token=token))
        await asyncio.sleep(0.5)
        token.cancel()

        with pytest.raises(ExecutionCancelledError):
            await asyncio.wait_for(task, timeout=10)

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="Uses SIGTERM")
    async def test_process_tree_is_killed_off_the_event_loop(self):
        kill_threads = []

        class RecordingPlatform(LinuxPlatform):
            def kill_process_tree(self, pid: int) -> None:
                kill_threads.append(threading.get_ident())
                super().kill_process_tree(pid)

        token = CancellationToken()
        executor = ProcessExecutor(RecordingPlatform())

        task = asyncio.create_task(executor.exec(PYTHON, ["-c", "import time; time.sleep(30)"], token=token))
        await asyncio.sleep(0.5)
        token.cancel()

        with pytest.raises(ExecutionCancelledError):
            await asyncio.wait_for(task, timeout=10)

        assert len(kill_threads) == 1
        assert kill_threads[0] != threading.get_ident()

    def test_elevated_command_is_wrapped(self, monkeypatch):
        captured = {}

        async def fake_spawn(program, *args, **kwargs):
            captured["program"] = program
            captured["args"] = list(args)
            raise OSError("not really spawning")

        monkeypatch.setattr("minikube_toolkit.process.executor.asyncio.create_subprocess_exec", fake_spawn)
        executor = ProcessExecutor(WindowsPlatform())

        with pytest.raises(ExternalProcessError):
            asyncio.run(executor.exec("cmd.exe", ["/c", "del", "x"], elevate=True))

        assert captured["program"] == "powershell.exe"
        assert "-Verb RunAs" in captured["args"][-1]
