from typing import Protocol


class SourceDecorator(Protocol):
    def decorate(self, source: str, highlighting: str, symbols: str) -> str: ...
