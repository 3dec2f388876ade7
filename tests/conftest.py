import pytest
import sys
from pathlib import Path
from types import SimpleNamespace

# Ensure src/ is in the python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from stacksync.core.session import SyncSession
from stacksync.runtime.compose import ComposeStack
from stacksync.runtime.coordinator import LifecycleCoordinator
from stacksync.runtime.initial_sync import InitialSync
from stacksync.runtime.ports import PortResolver
from stacksync.runtime.watcher import WatcherHandle
from stacksync.utils.diagnostics import CommandResult


MERGED_CONFIG = """
name: proj
services:
  web:
    image: nginx
    ports:
      - "8080:80"
  sync:
    image: unison
    container_name: proj_sync
    ports:
      - "5000"
"""


def _contains(args, tokens):
    width = len(tokens)
    return any(args[i : i + width] == list(tokens) for i in range(len(args) - width + 1))


class FakeRunner:
    """Stands in for run_command; answers by matching token runs in the command line."""

    def __init__(self):
        self.calls = []
        self._rules = []

    def on(self, *tokens, succeeded=True, output="", diagnostic="", returncode=None, effect=None):
        if returncode is None:
            returncode = 0 if succeeded else 1
        result = CommandResult(succeeded=succeeded, returncode=returncode, output=output, diagnostic=diagnostic)
        self._rules.insert(0, (list(tokens), result, effect))
        return self

    def __call__(self, args, cwd=None, log_path=None):
        command = [str(arg) for arg in args]
        self.calls.append(command)
        for tokens, result, effect in self._rules:
            if _contains(command, tokens):
                if effect is not None:
                    effect(command, log_path)
                return result.model_copy(update={"args": command})
        return CommandResult(args=command, succeeded=True, returncode=0)

    def called(self, *tokens):
        return [call for call in self.calls if _contains(call, tokens)]

    def compose_verbs(self):
        verbs = []
        for call in self.calls:
            if call[:2] == ["docker", "compose"]:
                tail = [token for token in call[2:] if token not in ("-f",) and not token.endswith(".yml")]
                verbs.append(tail[0] if tail else "")
        return verbs


class FakeSpawn:
    """Stands in for subprocess.Popen when the watcher is started."""

    def __init__(self, pid=4242, output=b"watch pass\n"):
        self.pid = pid
        self.output = output
        self.commands = []
        self.kwargs = []

    def __call__(self, command, **kwargs):
        self.commands.append(list(command))
        self.kwargs.append(kwargs)
        stdout = kwargs.get("stdout")
        if stdout is not None and hasattr(stdout, "write"):
            stdout.write(self.output)
        return SimpleNamespace(pid=self.pid)


class FakeKill:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def __call__(self, pid, sig):
        self.calls.append((pid, sig))
        if self.error is not None:
            raise self.error


class FakeNotifier:
    def __init__(self):
        self.messages = []

    def send(self, message, title=None):
        self.messages.append(message)


def write_initial_pass(command, log_path):
    if log_path is not None:
        with log_path.open("ab") as handle:
            handle.write(b"initial pass\n")


def healthy_runner(port="49153"):
    runner = FakeRunner()
    runner.on("config", output=MERGED_CONFIG)
    runner.on("port", output=f"0.0.0.0:{port}\n[::]:{port}\n")
    runner.on("-silent", effect=write_initial_pass)
    return runner


@pytest.fixture
def root_dir(tmp_path):
    """
    Returns a temporary directory to act as the sync root for tests.
    """
    return tmp_path


@pytest.fixture
def session(root_dir):
    return SyncSession(root=root_dir)


@pytest.fixture
def runner():
    return healthy_runner()


@pytest.fixture
def spawn():
    return FakeSpawn()


@pytest.fixture
def kill():
    return FakeKill()


@pytest.fixture
def notifier():
    return FakeNotifier()


def build_coordinator(session, runner, spawn, kill, notifier, prompt=None):
    compose = ComposeStack(session, runner=runner)
    ports = PortResolver(session, compose, runner=runner)
    watcher = WatcherHandle(session, spawn=spawn, kill=kill)
    ticks = iter([100.0, 107.0] * 10)
    initial_sync = InitialSync(
        session,
        compose,
        ports,
        watcher,
        notifier,
        runner=runner,
        clock=lambda: next(ticks),
    )
    return LifecycleCoordinator(session, compose, ports, watcher, initial_sync, notifier, prompt=prompt)


@pytest.fixture
def make_coordinator(session, runner, spawn, kill, notifier):
    def _make(prompt=None, **overrides):
        return build_coordinator(
            overrides.get("session", session),
            overrides.get("runner", runner),
            overrides.get("spawn", spawn),
            overrides.get("kill", kill),
            overrides.get("notifier", notifier),
            prompt=prompt,
        )

    return _make
