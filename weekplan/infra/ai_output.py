"""Helpers turning free-form model output into JSON."""
import json
import re
from json import JSONDecodeError
from typing import Any, Optional


def strip_code_fences(text: str) -> str:
    """Remove common markdown code fences and leading/trailing whitespace."""
    text = re.sub(r"```(?:json)?\n(.*?)```", r"\1", text, flags=re.S)
    text = re.sub(r"^```(?:json)?|```$", "", text.strip())
    return text.strip()


def remove_trailing_commas(text: str) -> str:
    """Remove common trailing commas in JSON-like text to help json.loads succeed."""
    return re.sub(r",\s*(\}|\])", r"\1", text)


def extract_json_by_balancing(text: str) -> Optional[str]:
    """Extract the first JSON object/array by balancing braces/brackets."""
    start = None
    stack = []
    in_string = False
    escape = False

    for i, ch in enumerate(text):
        if ch == '"' and not escape:
            in_string = not in_string
        if in_string and ch == "\\" and not escape:
            escape = True
            continue
        else:
            escape = False

        if not in_string:
            if ch in "{[":
                if start is None:
                    start = i
                stack.append(ch)
            elif ch in "}]":
                if not stack:
                    continue
                opening = stack.pop()
                if (opening == "{" and ch != "}") or (opening == "[" and ch != "]"):
                    return None
                if not stack and start is not None:
                    return text[start:i + 1]
    return None


def parse_model_json(text: str) -> Optional[Any]:
    """Best-effort JSON decoding of model output; None when nothing usable is found."""
    if not text:
        return None
    try:
        return json.loads(text)
    except JSONDecodeError:
        pass
    cleaned = remove_trailing_commas(strip_code_fences(text))
    try:
        return json.loads(cleaned)
    except JSONDecodeError:
        pass
    candidate = extract_json_by_balancing(cleaned)
    if candidate:
        try:
            return json.loads(remove_trailing_commas(candidate))
        except JSONDecodeError:
            return None
    return None


__all__ = ['strip_code_fences', 'remove_trailing_commas', 'extract_json_by_balancing', 'parse_model_json']
