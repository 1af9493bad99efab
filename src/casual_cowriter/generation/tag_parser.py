"""
Incremental parser for <thought>...</thought> blocks in streamed text.

A two-state scanner (outside / inside a thought block) with a pending buffer.
A tag may be split across any number of fragments, so a buffer tail that
could still be the start of the next tag is held back until more text
arrives or the stream ends.
"""

from dataclasses import dataclass

OPEN_TAG = "<thought>"
CLOSE_TAG = "</thought>"


@dataclass
class ParsedFragment:
    text: str = ""
    thought: str = ""

    def __bool__(self) -> bool:
        return bool(self.text or self.thought)


def _partial_tag_length(buffer: str, tag: str) -> int:
    """Length of the longest buffer suffix that is a proper prefix of `tag`."""
    for length in range(min(len(tag) - 1, len(buffer)), 0, -1):
        if buffer.endswith(tag[:length]):
            return length
    return 0


class ThoughtTagParser:
    """
    Splits streamed text into visible output and reasoning trace.

    Example:
        >>> parser = ThoughtTagParser()
        >>> parser.feed("abc<thou")
        ParsedFragment(text='abc', thought='')
        >>> parser.feed("ght>hidden</thou")
        ParsedFragment(text='', thought='hidden')
        >>> parser.feed("ght>def")
        ParsedFragment(text='def', thought='')
    """

    def __init__(self):
        self.in_thought = False
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text held back because it may be the beginning of a tag."""
        return self._buffer

    def feed(self, fragment: str) -> ParsedFragment:
        """Consume one streamed fragment and return what can be decided so far."""
        self._buffer += fragment
        result = ParsedFragment()

        while self._buffer:
            tag = CLOSE_TAG if self.in_thought else OPEN_TAG
            index = self._buffer.find(tag)

            if index != -1:
                self._emit(result, self._buffer[:index])
                self._buffer = self._buffer[index + len(tag) :]
                self.in_thought = not self.in_thought
                continue

            hold = _partial_tag_length(self._buffer, tag)
            self._emit(result, self._buffer[: len(self._buffer) - hold])
            self._buffer = self._buffer[len(self._buffer) - hold :]
            break

        return result

    def flush(self) -> ParsedFragment:
        """Release any held-back text at the end of the stream."""
        result = ParsedFragment()
        self._emit(result, self._buffer)
        self._buffer = ""
        return result

    def _emit(self, result: ParsedFragment, text: str) -> None:
        if self.in_thought:
            result.thought += text
        else:
            result.text += text
