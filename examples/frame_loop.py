#!/usr/bin/env python3
"""
Frame loop example for pollhttp

Fetches a URL while ticking the client at a fixed frame rate, and reports
any tick that blows the frame budget.

    python examples/frame_loop.py https://crypto.dog/websocket --transport threaded
"""

import argparse
import asyncio
import os
import threading
import time

import pollhttp

FRAME_RATE = 40


def start_host_loop():
    """Run an asyncio loop on a background thread, standing in for a host runtime"""
    loop = asyncio.new_event_loop()
    threading.Thread(target=loop.run_forever, daemon=True).start()
    return loop


def resolve_transport(name=None):
    """Pick the transport name and its options, honouring POLLHTTP_TRANSPORT"""
    name = name or os.environ.get(pollhttp.TRANSPORT_ENV_VAR, pollhttp.DEFAULT_TRANSPORT)
    options = {"loop": start_host_loop()} if name == "host" else {}
    return name, options


def on_complete(request):
    print(f"Server returned {request.status()} ({pollhttp.describe(request.status())})")
    print(f"{len(request.content())} bytes from {request.url} in {request.elapsed:.3f}s")


def main():
    parser = argparse.ArgumentParser(description="Fetch a URL from a frame loop")
    parser.add_argument("url", nargs="?", default="https://crypto.dog/websocket")
    parser.add_argument("--transport", choices=sorted(pollhttp.TRANSPORTS), default=None)
    parser.add_argument("--fps", type=int, default=FRAME_RATE)
    args = parser.parse_args()

    transport, options = resolve_transport(args.transport)
    max_delay = 1.0 / args.fps

    with pollhttp.Client(transport=transport, **options) as client:
        print(f"Using {client.transport.name} transport")
        print(f"Acceptable delay: {max_delay * 1000:.1f} milliseconds")

        client.add_request(pollhttp.Request("GET", args.url).on_complete(on_complete))

        # In graphical applications, call perform() from the render loop instead
        while client.active():
            started = time.monotonic()
            client.perform()
            overrun = time.monotonic() - started
            if overrun > max_delay:
                print(f"perform() took too long: {overrun * 1000:.1f} milliseconds")
            time.sleep(max(0.0, max_delay - overrun))


if __name__ == "__main__":
    main()
