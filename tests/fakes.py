"""In-memory stand-ins for the Playwright page/browser surface used by the runner."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple


class FakeResponse:
    def __init__(self, status: int = 200):
        self.status = status


class FakeRequest:
    def __init__(
        self,
        url: str,
        method: str = "get",
        response: Optional[FakeResponse] = None,
        raise_on_response: bool = False,
    ):
        self.url = url
        self.method = method
        self._response = response
        self._raise = raise_on_response

    async def response(self) -> Optional[FakeResponse]:
        if self._raise:
            raise RuntimeError("response unavailable")
        return self._response


class FakeConsoleMessage:
    def __init__(self, type: str, text: str, location: Any = None):
        self.type = type
        self.text = text
        self.location = location if location is not None else {}


class BrokenLocationMessage(FakeConsoleMessage):
    @property
    def location(self) -> Any:
        raise RuntimeError("no location")

    @location.setter
    def location(self, value: Any) -> None:
        pass


class FakePage:
    def __init__(
        self,
        *,
        title: str = "Example Domain",
        content: str = "<html><body>Welcome</body></html>",
        response: Optional[FakeResponse] = None,
        no_response: bool = False,
        goto_error: Optional[BaseException] = None,
        selectors: Optional[List[str]] = None,
        selector_errors: Optional[Dict[str, str]] = None,
        screenshot: Any = b"png-bytes",
        screenshot_error: bool = False,
        close_error: bool = False,
    ):
        self._title = title
        self._content = content
        self._response = None if no_response else (response or FakeResponse(200))
        self._goto_error = goto_error
        self._selectors = set(selectors or [])
        self._selector_errors = dict(selector_errors or {})
        self._screenshot = screenshot
        self._screenshot_error = screenshot_error
        self._close_error = close_error
        self.handlers: Dict[str, List[Callable[[Any], None]]] = {}
        self.during_goto: List[Tuple[str, Any]] = []
        self.during_title: List[Tuple[str, Any]] = []
        self.goto_calls: List[Dict[str, Any]] = []
        self.screenshot_calls = 0
        self.content_calls = 0
        self.closed = False

    def on(self, event: str, handler: Callable[[Any], None]) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable[[Any], None]) -> None:
        self.handlers.get(event, []).remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.handlers.get(event, [])):
            handler(payload)

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[float] = None) -> Any:
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        for event, payload in self.during_goto:
            self.emit(event, payload)
        if self._goto_error is not None:
            raise self._goto_error
        return self._response

    async def title(self) -> str:
        for event, payload in self.during_title:
            self.emit(event, payload)
        return self._title

    async def content(self) -> str:
        self.content_calls += 1
        return self._content

    async def query_selector(self, selector: str) -> Any:
        if selector in self._selector_errors:
            raise ValueError(self._selector_errors[selector])
        return object() if selector in self._selectors else None

    async def screenshot(self, full_page: bool = False) -> Any:
        self.screenshot_calls += 1
        if self._screenshot_error:
            raise RuntimeError("screenshot failed")
        return self._screenshot

    async def close(self) -> None:
        self.closed = True
        if self._close_error:
            raise RuntimeError("page close failed")


class FakeBrowser:
    def __init__(self, page: FakePage, close_error: bool = False, profile_error: bool = False):
        self.page = page
        self.closed = False
        self._close_error = close_error
        self._profile_error = profile_error
        self.new_page_calls: List[Dict[str, Any]] = []

    async def new_page(self, **options: Any) -> FakePage:
        self.new_page_calls.append(dict(options))
        if options and self._profile_error:
            raise RuntimeError("profile rejected")
        return self.page

    async def close(self) -> None:
        self.closed = True
        if self._close_error:
            raise RuntimeError("browser close failed")


class FakeSessionManager:
    def __init__(self, page: Optional[FakePage] = None, launch_error: Optional[BaseException] = None, **browser_kwargs: Any):
        self.page = page or FakePage()
        self.browser = FakeBrowser(self.page, **browser_kwargs)
        self._launch_error = launch_error
        self.launches = 0

    async def launch(self) -> FakeBrowser:
        self.launches += 1
        if self._launch_error is not None:
            raise self._launch_error
        return self.browser
