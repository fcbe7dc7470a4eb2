"""Hermetic Playwright stand-ins so engine tests never launch a browser."""

import asyncio
import inspect

import pytest

from browser_script.config import RunnerConfig
from browser_script.core import ScriptRunner
from browser_script.credentials import CredentialNotFound


class FakeElement:
    def __init__(self, name: str = ""):
        self.name = name
        self.clicks = 0
        self.typed = []
        self.value = "prefilled"

    async def click(self):
        self.clicks += 1

    async def type(self, text: str):
        self.typed.append(text)


class FakeKeyboard:
    def __init__(self):
        self.typed = []

    async def type(self, text: str):
        self.typed.append(text)


class FakeDialog:
    """Resolves the pending window.prompt() once accepted or dismissed."""

    def __init__(self, message: str):
        self.message = message
        self.handled = asyncio.get_running_loop().create_future()

    async def accept(self, text: str = ""):
        self.handled.set_result(text)

    async def dismiss(self):
        self.handled.set_result(None)


class FakePage:
    def __init__(self, context, title: str = "", url: str = "about:blank"):
        self.context = context
        self.url = url
        self._title = title
        self._closed = False
        self._listeners = {}
        self._once = {}
        self.keyboard = FakeKeyboard()
        self.clicked = []
        self.focused = []
        self.load_states = []
        self.brought_to_front = 0

    def on(self, event, callback):
        self._listeners.setdefault(event, []).append(callback)

    def once(self, event, callback):
        self._once.setdefault(event, []).append(callback)

    def remove_listener(self, event, callback):
        for registry in (self._once, self._listeners):
            if callback in registry.get(event, []):
                registry[event].remove(callback)
                return
        raise KeyError(event)

    def listener_count(self, event):
        return len(self._listeners.get(event, [])) + len(self._once.get(event, []))

    async def _emit(self, event, payload):
        callbacks = self._listeners.get(event, []) + self._once.pop(event, [])
        for callback in callbacks:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result

    async def _open_dialog(self, message):
        # Like Playwright: no listener means auto-dismiss; listeners run as
        # detached tasks whose errors never reach the evaluate() caller.
        dialog = FakeDialog(message)
        callbacks = self._listeners.get("dialog", []) + self._once.pop("dialog", [])
        if not callbacks:
            return None
        for callback in callbacks:
            result = callback(dialog)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                task.add_done_callback(lambda t: t.cancelled() or t.exception())
        try:
            return await asyncio.wait_for(asyncio.shield(dialog.handled), timeout=1)
        except asyncio.TimeoutError:
            raise AssertionError("prompt dialog was never accepted or dismissed") from None

    def is_closed(self):
        return self._closed

    async def title(self):
        return self._title

    async def goto(self, url, wait_until=None):
        if url in self.context.unreachable:
            raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.url = url
        self._title = self.context.titles.get(url, url)
        self.load_states.append(wait_until)

    async def bring_to_front(self):
        self.brought_to_front += 1

    async def wait_for_load_state(self, state="load"):
        self.load_states.append(state)

    async def wait_for_selector(self, selector, state=None):
        element = self.context.elements.get(selector)
        if element is None:
            raise TimeoutError(f'Timeout 30000ms exceeded waiting for selector "{selector}"')
        return element

    async def click(self, selector):
        if selector not in self.context.elements:
            raise TimeoutError(f'Timeout 30000ms exceeded waiting for selector "{selector}"')
        self.clicked.append(selector)
        self.context.elements[selector].clicks += 1

    async def focus(self, selector):
        if selector not in self.context.elements:
            raise TimeoutError(f'Timeout 30000ms exceeded waiting for selector "{selector}"')
        self.focused.append(selector)

    async def eval_on_selector(self, selector, expression):
        element = self.context.elements.get(selector)
        if element is None:
            raise RuntimeError(f'Failed to find element matching selector "{selector}"')
        element.value = ""

    async def evaluate(self, expression, arg=None):
        if "clipboard" in expression:
            if "clipboard-read" not in self.context.granted:
                raise RuntimeError("Read permission denied.")
            return self.context.clipboard
        if "prompt" in expression:
            return await self._open_dialog(arg)
        raise AssertionError(f"unexpected evaluate: {expression}")

    async def close(self):
        self._closed = True
        if self in self.context.pages:
            self.context.pages.remove(self)
        await self._emit("close", self)


class FakeBrowserContext:
    def __init__(self):
        self.pages = []
        self.elements = {}
        self.titles = {}
        self.unreachable = set()
        self.clipboard = ""
        self.granted = set()
        self.grants = []
        self.default_timeout = None

    async def new_page(self):
        page = FakePage(self)
        self.pages.append(page)
        return page

    def add_external_page(self, title, url="https://popup.example.com"):
        page = FakePage(self, title=title, url=url)
        self.pages.append(page)
        return page

    async def grant_permissions(self, permissions, origin=None):
        self.granted.update(permissions)
        self.grants.append((tuple(permissions), origin))

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout


class FakeBrowser:
    def __init__(self, context):
        self.context = context
        self.closed = 0
        self.launch_options = None

    async def new_context(self):
        return self.context

    async def close(self):
        self.closed += 1


class FakeBrowserType:
    def __init__(self, browser):
        self.browser = browser

    async def launch(self, headless=False):
        self.browser.launch_options = {"headless": headless}
        return self.browser


class FakePlaywright:
    def __init__(self, browser):
        self.chromium = FakeBrowserType(browser)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeCredentials:
    def __init__(self, secrets=None, error=None):
        self.secrets = dict(secrets or {})
        self.error = error
        self.set_calls = []

    async def get(self, account, service):
        if self.error is not None:
            raise self.error
        if (account, service) not in self.secrets:
            raise CredentialNotFound(account, service)
        return self.secrets[(account, service)]

    async def set(self, account, service, secret):
        self.set_calls.append((account, service, secret))
        self.secrets[(account, service)] = secret


class FakePrompter:
    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.questions = []

    async def ask(self, question, secret=True):
        self.questions.append((question, secret))
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


@pytest.fixture
def browser_context():
    return FakeBrowserContext()


@pytest.fixture
def credentials():
    return FakeCredentials()


@pytest.fixture
def prompter():
    return FakePrompter(["typed-secret"])


@pytest.fixture
def config():
    return RunnerConfig(target_timeout=0.2, poll_interval=0.01)


@pytest.fixture
def runner(config, credentials, prompter):
    return ScriptRunner(config, credentials=credentials, prompter=prompter)


@pytest.fixture
def session(runner, browser_context):
    return runner.new_session(browser_context=browser_context)
