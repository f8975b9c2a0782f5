"""
kpl/_batch.py — równoległe przetwarzanie dokumentów z paskiem postępu.

Jeden dokument = jedno zadanie w ThreadPoolExecutor. Każdy wyjątek zadania
trafia do `failed` z identyfikatorem dokumentu; pozostałe dokumenty są
przetwarzane dalej, a gotowe wyniki nie przepadają.
  - błędy rekonstrukcji i sieci  → log.error (bez śladu stosu)
  - inne wyjątki                 → log.exception (błąd programu, ślad stosu)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

import requests
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from data_model.errors import ReconstructionError

log = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DOCUMENT_ERRORS = (ReconstructionError, requests.RequestException)


@dataclass(slots=True)
class BatchResult(Generic[T, R]):
    done:   list[tuple[T, R]] = field(default_factory=list)
    failed: list[tuple[T, str]] = field(default_factory=list)


def run_batch(
    items: list[T],
    worker: Callable[[T], R],
    *,
    label: Callable[[T], str],
    workers: int,
    console: Console,
    description: str = "Przetwarzanie",
) -> BatchResult[T, R]:
    result: BatchResult[T, R] = BatchResult()
    if not items:
        return result

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=len(items))
        with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
            futures = {pool.submit(worker, item): item for item in items}
            for future in as_completed(futures):
                item = futures[future]
                try:
                    result.done.append((item, future.result()))
                except DOCUMENT_ERRORS as e:
                    log.error("%s: %s", label(item), e)
                    result.failed.append((item, str(e)))
                except Exception as e:
                    log.exception("%s: nieoczekiwany błąd", label(item))
                    result.failed.append((item, f"{type(e).__name__}: {e}"))
                progress.advance(task)

    return result
