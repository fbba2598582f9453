"""
Treepick CLI - Command-line interface for the server.

Usage:
    treepick serve [--host H] [--port P]   Run the game server
    treepick snapshot <file>               Show a saved snapshot
"""

import argparse
import sys


DEFAULT_PORT = 8082


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Treepick - Christmas Tree Picking Game Server",
        prog="treepick",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the game server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on")
    serve_parser.add_argument("--tick-interval", type=float, default=None, help="Heartbeat period in seconds")
    serve_parser.add_argument("--snapshot", default=None, help="Snapshot file to restore and save")
    serve_parser.add_argument("--snapshot-every", type=int, default=None, help="Ticks between snapshots")
    serve_parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    serve_parser.add_argument("--log-file", default=None, help="Also log to this file")

    # Snapshot command
    snapshot_parser = subparsers.add_parser("snapshot", help="Show a saved snapshot")
    snapshot_parser.add_argument("snapshot_file", help="Path to snapshot file")

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "snapshot":
        cmd_snapshot(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the game server."""
    import os
    import uvicorn

    from .api.app import create_app, create_game_server
    from .utils.logging import setup_logging

    setup_logging(
        log_level=args.log_level or os.getenv("TREEPICK_LOG_LEVEL", "INFO"),
        log_file=args.log_file,
    )

    server = create_game_server(
        snapshot_file=args.snapshot,
        snapshot_every=args.snapshot_every,
    )
    app = create_app(server=server, tick_interval=args.tick_interval)
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")


def cmd_snapshot(args):
    """Show a saved snapshot."""
    from .session import SnapshotStore, SnapshotError
    from .games.tree import pickable_cells

    store = SnapshotStore(args.snapshot_file)
    try:
        state = store.load()
    except SnapshotError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if state is None:
        print(f"Error: File not found: {args.snapshot_file}")
        sys.exit(1)

    print(f"Phase: {state.phase.value}")
    print(f"Time: {state.time}")
    if state.lobby:
        print("Lobby:")
        for name, entry in state.lobby.items():
            print(f"  - {name}{' (ready)' if entry.is_ready else ''}")
    if state.players:
        print(f"Players: {', '.join(state.players)} (turn: {state.turn})")
    if state.spectators:
        print(f"Spectators: {', '.join(state.spectators)}")
    if state.scores:
        print("Scores:")
        for name, score in sorted(state.scores.items(), key=lambda item: -item[1]):
            print(f"  - {name}: {'lost' if score < 0 else score}")
    print(f"Pickable cells: {len(pickable_cells(state.tree))}")


if __name__ == "__main__":
    main()
