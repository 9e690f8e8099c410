"""Health Informer - cited answers to health questions

Simple CLI for running a search-and-synthesize query, either in-process or
against a running server.
"""

import argparse
import asyncio

from health_informer.agents.orchestrator import SearchOrchestrator
from health_informer.client.stream_consumer import SearchStreamConsumer, StreamState, apply_event


def print_event(state: StreamState, event: dict) -> None:
    event_type = event.get("type")

    if event_type == "phase-update":
        print(f"\n[~] {event.get('phase')}: {event.get('message', '')}")

    elif event_type == "found":
        sources = event.get("sources", [])
        print(f"[*] Found {len(sources)} sources")
        for i, source in enumerate(sources, 1):
            print(f"  {i}. {source.get('title', '')[:80]}")

    elif event_type == "source-complete":
        print(f"  [+] {event.get('message', '')[:120]}")

    elif event_type == "content-chunk":
        print(event.get("chunk", ""), end="", flush=True)

    elif event_type == "final-result":
        print(f"\n\n{'=' * 50}")
        print("ANSWER:")
        print(f"{'=' * 50}")
        print(state.answer)
        for i, source in enumerate(state.sources, 1):
            print(f"  [Source {i}] {source.get('url', '')}")

    elif event_type == "error":
        print(f"\n[!] Error: {event.get('message', 'Unknown error')}")


async def run_local(query: str) -> StreamState:
    state = StreamState()
    async for event in SearchOrchestrator().run(query):
        payload = event.to_dict()
        apply_event(state, payload)
        print_event(state, payload)
    return state


async def run_remote(query: str, server: str) -> StreamState:
    consumer = SearchStreamConsumer(server)
    state = await consumer.run(query, on_update=print_event)
    print(f"\n[*] Finished in {state.elapsed_ms}ms")
    return state


def main():
    parser = argparse.ArgumentParser(description="Health Informer search")
    parser.add_argument("--query", "-q", required=True, help="Health question")
    parser.add_argument("--server", "-s", help="Base URL of a running server (default: run in-process)")

    args = parser.parse_args()

    print(f"Question: {args.query}")
    print("-" * 50)
    if args.server:
        state = asyncio.run(run_remote(args.query, args.server))
    else:
        state = asyncio.run(run_local(args.query))
    raise SystemExit(1 if state.error else 0)


if __name__ == "__main__":
    main()
