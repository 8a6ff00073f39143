"""Functions for printing the contents of an `OrderedMap`."""

import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TextIO


if TYPE_CHECKING:
    from ordmap.ordered_map import OrderedMap


def dump(omap: "OrderedMap | Mapping") -> str:
    """Return one ``[index]: key => value`` line per entry, wrapped in braces.

    The format is meant for humans and comes with no parsing guarantees.

    Examples
    --------
    >>> from ordmap import OrderedMap
    >>> print(dump(OrderedMap([("a", "Hello"), ("c", "World")])))
    {
    [0]: a => Hello
    [1]: c => World
    }
    """
    lines = ["{"]
    for index, (key, value) in enumerate(omap.items()):
        lines.append(f"[{index}]: {key} => {value}")
    lines.append("}")
    return "\n".join(lines)


def debugprint(
    omap: "OrderedMap | Mapping", file: TextIO | str | None = None
) -> Any:
    """Print `dump` of `omap`.

    Parameters
    ----------
    omap
        The map to print.
    file
        File-like object to which to print the output. If ``None``,
        ``sys.stdout`` is used; if ``"str"``, the output is returned as a string.

    Returns
    -------
    The string itself when ``file="str"``, otherwise the file it was written to.
    """
    text = dump(omap)
    if file == "str":
        return text
    if file is None:
        file = sys.stdout
    print(text, file=file)
    return file
