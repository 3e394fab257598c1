"""Network transports used by the registry components."""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from ..config.settings import Config
from ..utils.command import CommandError, CommandRunner


logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A GET did not produce a usable body."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(f"GET {url} failed: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


@dataclass
class FetchResult:
    """Body and content type of a successful GET."""
    body: bytes
    content_type: str = ''

    def json(self) -> Any:
        """Decode the body as JSON; raises ValueError when it is not."""
        return json.loads(self.body.decode('utf-8'))


class Transport:
    """Base transport: a plain HTTPS GET with headers."""

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        raise NotImplementedError

    def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        return self.get(url, headers).json()

    def close(self):
        pass


class HttpTransport(Transport):
    """Transport backed by requests sessions, one per calling thread."""

    def __init__(self, timeout: float = 15.0, user_agent: Optional[str] = None,
                 session_factory: Callable[[], requests.Session] = requests.Session):
        self.timeout = timeout
        self.user_agent = user_agent
        self.session_factory = session_factory
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The calling thread's session, created on first use."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self.session_factory()
            if self.user_agent:
                session.headers['User-Agent'] = self.user_agent
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        try:
            response = self.session.get(url, headers=headers or {}, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(url, str(e))

        if not response.ok:
            raise FetchError(url, f"HTTP {response.status_code}", response.status_code)
        if not response.content:
            raise FetchError(url, "empty body", response.status_code)

        content_type = response.headers.get('Content-Type', '').split(';')[0].strip()
        return FetchResult(body=response.content, content_type=content_type)

    def close(self):
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()


class CurlTransport(Transport):
    """Transport that shells out to curl through a command runner."""

    def __init__(self, runner: CommandRunner, timeout: float = 15.0,
                 user_agent: Optional[str] = None, elevated: bool = False):
        self.runner = runner
        self.timeout = timeout
        self.user_agent = user_agent
        self.elevated = elevated

    def build_argv(self, url: str, headers: Optional[Dict[str, str]] = None):
        argv = ['curl', '-fsSL', '--max-time', str(self.timeout)]
        if self.user_agent:
            argv += ['-H', f"User-Agent: {self.user_agent}"]
        for name, value in (headers or {}).items():
            argv += ['-H', f"{name}: {value}"]
        argv.append(url)
        return argv

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        try:
            result = self.runner.run(self.build_argv(url, headers), elevated=self.elevated)
        except CommandError as e:
            raise FetchError(url, str(e))

        if not result.ok:
            reason = f"curl exited with {result.exit_code}" if result.exit_code else "empty body"
            raise FetchError(url, reason)

        return FetchResult(body=result.stdout)


def create_transport(config: Config) -> Transport:
    """Build the transport named by the configuration."""
    if config.transport == 'curl':
        runner = CommandRunner(timeout=config.request_timeout + 5)
        return CurlTransport(
            runner,
            timeout=config.request_timeout,
            user_agent=config.user_agent,
            elevated=config.elevated
        )
    return HttpTransport(timeout=config.request_timeout, user_agent=config.user_agent)
