#!/usr/bin/env python3
"""
Flux remote image generator client.

Posts a generation job to the remote API, then polls the returned
polling_url until the job reports Ready (download the sample), Error/Failed
(raise), or the caller's timeout elapses. There is no built-in retry cap;
bound the loop with `timeout` or by cancelling the calling thread/task.
"""

import base64
import io
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

from spritegen.core import get_logger, load_config, load_env
from spritegen.raster.output import RenderResult

log = get_logger("flux")

MAX_INPUT_IMAGE_BYTES = 20 * 1024 * 1024
DEFAULT_SIZE = 1024


class RemoteGenerationError(RuntimeError):
    """The remote service rejected the job or reported a failure."""


class FluxClient:
    """
    Thin blocking client for the Flux generation API.

    Args:
        api_key: API key; defaults to the env var named in remote.api_key_env
        endpoint: Job submission URL
        poll_interval: Seconds between status polls
        session: Optional requests.Session (tests inject a stub)
    """

    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None,
                 poll_interval: Optional[float] = None, session=None):
        cfg = load_config().remote
        if api_key is None:
            api_key = load_env().get(cfg.api_key_env)
        self.api_key = api_key
        self.endpoint = endpoint or cfg.endpoint
        self.poll_interval = cfg.poll_interval_s if poll_interval is None else poll_interval
        self.request_timeout = cfg.request_timeout_s
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {"x-key": self.api_key}

    def _check(self, response, what: str):
        if not response.ok:
            log.error(f"[flux] {what} failed: HTTP {response.status_code}")
            raise RemoteGenerationError(f"{what} failed ({response.status_code}): {response.text}")
        return response

    def request(self, payload: Dict[str, Any], timeout: Optional[float] = None) -> RenderResult:
        """
        Submit a job and block until it finishes.

        Args:
            payload: Job body; must include a non-blank `prompt`
            timeout: Optional overall deadline in seconds

        Returns:
            RenderResult with the downloaded image bytes

        Raises:
            ValueError: Missing API key or blank prompt
            RemoteGenerationError: Non-2xx response or Error/Failed status
            TimeoutError: The deadline elapsed while polling
        """
        if not self.api_key:
            raise ValueError("Flux API key missing")
        prompt = payload.get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError("A prompt string is required")

        started = time.monotonic()
        deadline = None if timeout is None else started + timeout

        body = dict(payload, prompt=prompt.strip())
        post = self._check(
            self.session.post(self.endpoint, json=body, headers=self._headers(),
                              timeout=self.request_timeout),
            "job submission",
        )
        job = post.json()
        polling_url = job.pop("polling_url", None)
        if not polling_url:
            raise RemoteGenerationError(f"No polling_url in response: {job}")
        log.info(f"[flux] submitted job id={job.get('id')}")

        polls = 0
        while True:
            polls += 1
            poll = self._check(
                self.session.get(polling_url, headers=self._headers(), timeout=self.request_timeout),
                "status poll",
            )
            status = poll.json()
            state = status.get("status")

            if state == "Ready":
                return self._download(status, job, polls, time.monotonic() - started)
            if state in ("Error", "Failed"):
                log.error(f"[flux] job failed after {polls} polls: {status}")
                raise RemoteGenerationError(f"Remote job failed: {status}")

            if deadline is not None and time.monotonic() + self.poll_interval > deadline:
                raise TimeoutError(f"Flux job did not finish within {timeout}s ({polls} polls)")
            log.debug(f"[flux] polling ({polls}) status={state}")
            time.sleep(self.poll_interval)

    def _download(self, status: Dict[str, Any], job: Dict[str, Any], polls: int,
                  duration: float) -> RenderResult:
        sample_url = (status.get("result") or {}).get("sample")
        if not sample_url:
            raise RemoteGenerationError(f"Ready status without result.sample: {status}")
        img = self._check(self.session.get(sample_url, timeout=self.request_timeout), "sample download")
        buffer = img.content

        width = height = None
        fmt = None
        try:
            with Image.open(io.BytesIO(buffer)) as sample:
                width, height = sample.size
                fmt = (sample.format or "").lower() or None
        except (UnidentifiedImageError, OSError) as e:
            log.warning(f"[flux] could not read sample dimensions: {e}")

        final = {k: v for k, v in status.items() if k != "status"}
        log.info(f"[flux] ready after {polls} polls in {duration:.1f}s ({width}x{height})")
        return RenderResult(
            buffer=buffer,
            width=width,
            height=height,
            metadata={"format": fmt, "duration": duration, "pollCount": polls,
                      "final": final, **job},
            mime=img.headers.get("content-type") or "image/png",
        )

    def generate(self, prompt: str, timeout: Optional[float] = None) -> RenderResult:
        """Text-to-image at 1024x1024 with a fixed seed and no prompt upsampling."""
        result = self.request(
            {
                "prompt": prompt,
                "prompt_upsampling": False,
                "seed": 0,
                "width": DEFAULT_SIZE,
                "height": DEFAULT_SIZE,
            },
            timeout=timeout,
        )
        result.width, result.height = DEFAULT_SIZE, DEFAULT_SIZE
        result.metadata["prompt"] = prompt.strip()
        return result

    def edit(self, prompt: str, image_url: str, timeout: Optional[float] = None) -> RenderResult:
        """
        Image edit: download the source image and submit it inline.

        Raises:
            ValueError: Blank prompt, missing or malformed image_url, or an
                input image over 20 MB
            RemoteGenerationError: Download failure or unreadable result size
        """
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValueError("A prompt string is required")
        image_url = (image_url or "").strip()
        if not image_url:
            raise ValueError("An image_url is required")
        parsed = urlparse(image_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("image_url must be a valid URL")

        src = self._check(self.session.get(image_url, timeout=self.request_timeout), "image download")
        if len(src.content) > MAX_INPUT_IMAGE_BYTES:
            raise ValueError(
                f"Input image too large: {len(src.content)} bytes (max {MAX_INPUT_IMAGE_BYTES})"
            )

        result = self.request(
            {
                "prompt": prompt,
                "input_image": base64.b64encode(src.content).decode("ascii"),
                "prompt_upsampling": False,
                "seed": 0,
                "output_format": "png",
            },
            timeout=timeout,
        )
        if result.width is None or result.height is None:
            raise RemoteGenerationError("Unable to determine output image dimensions")
        result.metadata.update({"prompt": prompt, "image_url": image_url})
        return result
