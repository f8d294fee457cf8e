from typing import Optional, cast
from collections.abc import Generator, Sequence

def prev_curr_next_iter[T](
    items: Sequence[T]
) -> Generator[tuple[Optional[T], T, Optional[T]], None, None]:
    """Each item with its neighbours, None past either end."""
    if not items:
        return
    if len(items) == 1:
        yield (None, items[0], None)
        return
    yield (None, items[0], items[1])
    for i in range(len(items)-2):
        yield cast(tuple[T, T, T], tuple(items[i:i+3]))
    yield (items[-2], items[-1], None)
