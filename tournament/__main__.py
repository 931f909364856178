import argparse
import asyncio
import logging

from threecard.models import RoomConfig
from .server import HostServer

logging.basicConfig(level=logging.INFO)


def main() -> None:
    # CLI doubles as documentation for the room settings.
    parser = argparse.ArgumentParser(description="Three-card tournament host server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--starting-money", type=int, default=10_000)
    parser.add_argument("--ante", type=int, default=100, help="Ante collected each hand; also the opening minimum bet")
    parser.add_argument("--min-players", type=int, default=2)
    parser.add_argument("--max-players", type=int, default=8)
    parser.add_argument(
        "--next-hand-delay",
        type=int,
        default=3_000,
        help="Pause in milliseconds between a resolved hand and the next deal",
    )
    parser.add_argument(
        "--hand-cap",
        type=int,
        default=None,
        help="Hands per tournament (defaults to the number of players at the start)",
    )
    args = parser.parse_args()

    config = RoomConfig(
        starting_money=args.starting_money,
        ante=args.ante,
        min_players=args.min_players,
        max_players=args.max_players,
        next_hand_delay_ms=args.next_hand_delay,
        hand_cap=args.hand_cap,
    )

    server = HostServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
