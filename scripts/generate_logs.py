"""
Synthetic candidate generator for logsieve.

Writes deterministic pseudo-random JSONL candidates: a mix of HTTP access logs
(including static assets, 304s and source maps that admission treats as noise)
and non-HTTP protocol/job logs, with a configurable share of exact repeats so
the duplicate path gets exercised.
"""

from __future__ import annotations

import json
import random
import sys
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List

import typer

app = typer.Typer(help="Generate synthetic log candidates as JSONL.")

_URLS = ["/", "/login", "/my-account/billing", "/api/v1/emails", "/api/v1/domains"]
_ASSETS = [
    ("/img/logo.png", "image/png"),
    ("/css/app.css", "text/css; charset=utf-8"),
    ("/fonts/inter.woff2", "font/woff2"),
    ("/js/app.js.map", "application/json; charset=utf-8"),
]
_SMTP_MESSAGES = [
    "Mail from sender rejected",
    "Recipient verification failed",
    "Connection closed by remote host",
    "Greylisted, please try again later",
]


def _http_candidate(rng: random.Random) -> Dict[str, Any]:
    roll = rng.random()
    if roll < 0.15:
        url, content_type = rng.choice(_ASSETS)
        status = 200
    elif roll < 0.25:
        url, content_type, status = rng.choice(_URLS), None, 304
    else:
        url, content_type = rng.choice(_URLS), "text/html; charset=utf-8"
        status = rng.choice([200, 200, 200, 302, 404, 429, 500])

    request_id = str(uuid.UUID(int=rng.getrandbits(128)))
    headers: Dict[str, Any] = {"x-request-id": request_id}
    if content_type:
        headers["content-type"] = content_type
    return {
        "message": f"GET {url} {status} {rng.randint(1, 900)}ms",
        "meta": {
            "is_http": True,
            "level": "error" if status >= 500 else "info",
            "request": {"id": request_id, "method": "GET", "url": url},
            "response": {"status_code": status, "headers": headers},
            "user": {"ip_address": f"10.0.{rng.randint(0, 3)}.{rng.randint(1, 254)}"},
        },
    }


def _plain_candidate(rng: random.Random) -> Dict[str, Any]:
    candidate: Dict[str, Any] = {
        "message": rng.choice(_SMTP_MESSAGES),
        "meta": {"level": rng.choice(["info", "warn", "error"])},
    }
    if rng.random() < 0.3:
        candidate["err"] = {"name": "SMTPError", "message": candidate["message"], "response_code": 550}
    if rng.random() < 0.5:
        candidate["user"] = f"user-{rng.randint(1, 20)}"
    return candidate


def generate_candidates(rows: int, seed: int, repeat_ratio: float = 0.2) -> List[Dict[str, Any]]:
    rng = random.Random(seed)
    candidates: List[Dict[str, Any]] = []
    for _ in range(rows):
        if candidates and rng.random() < repeat_ratio:
            candidates.append(rng.choice(candidates))
        elif rng.random() < 0.6:
            candidates.append(_http_candidate(rng))
        else:
            candidates.append(_plain_candidate(rng))
    return candidates


def write_jsonl(path: Path, candidates: List[Dict[str, Any]]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for candidate in candidates:
            f.write(json.dumps(candidate))
            f.write("\n")
    return len(candidates)


@app.command()
def main(
    rows: int = typer.Option(
        10_000,
        "--rows",
        "-r",
        help="Number of candidates to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    repeat_ratio: float = typer.Option(
        0.2,
        "--repeat-ratio",
        help="Share of candidates that repeat an earlier one verbatim.",
    ),
    output: Path = typer.Option(
        Path("candidates.jsonl"),
        "--output",
        "-o",
        help="JSONL output path.",
    ),
) -> None:
    """
    Generate synthetic log candidates for `logsieve ingest`.
    """
    start = time.perf_counter()
    written = write_jsonl(output, generate_candidates(rows, seed=seed, repeat_ratio=repeat_ratio))
    duration = time.perf_counter() - start
    typer.echo(f"Wrote {written:,} candidates -> {output} in {duration:.2f}s (seed={seed})")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
