#!/usr/bin/env python3
"""Atlas assistant CLI."""

import argparse
import logging
import sys
import uuid

from config.settings import Settings
from errors import RequestValidationError
from schemas.context import AgentRequest
from orchestrator import AgentOrchestrator


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Atlas - multi-agent assistant with persistent conversation memory"
    )
    parser.add_argument(
        "--message",
        "-m",
        type=str,
        required=True,
        help="Message to send"
    )
    parser.add_argument(
        "--conversation-id",
        "-c",
        type=str,
        help="Conversation to continue (default: start a new one)"
    )
    parser.add_argument(
        "--user-id",
        "-u",
        type=str,
        default="cli-user",
        help="User ID (default: cli-user)"
    )
    parser.add_argument(
        "--kind",
        type=str,
        choices=["chat", "task", "research", "reasoning"],
        default="chat",
        help="Routing hint (default: chat)"
    )
    parser.add_argument(
        "--priority",
        type=str,
        choices=["low", "medium", "high", "urgent"],
        default="medium",
        help="Request priority (default: medium)"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to SQLite conversation database"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    settings = Settings(db_path=args.db_path, verbose=args.verbose)
    logging.basicConfig(
        level=logging.DEBUG if settings.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    conversation_id = args.conversation_id or str(uuid.uuid4())

    try:
        request = AgentRequest.from_payload({
            "kind": args.kind,
            "content": args.message,
            "priority": args.priority,
            "context": {
                "user_id": args.user_id,
                "conversation_id": conversation_id,
                "session_id": str(uuid.uuid4()),
            },
            "metadata": {"source": "cli"},
        })
    except RequestValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        sys.exit(1)

    orchestrator = AgentOrchestrator(settings=settings)
    response = orchestrator.handle(request)

    print("\n" + "=" * 60)
    print(f"AGENT: {response.agent_used} ({response.execution_time_ms} ms)")
    print(f"CONVERSATION: {conversation_id}")
    print("=" * 60 + "\n")
    print(response.content)

    if response.follow_up_actions:
        print("\nSuggested next steps:")
        for action in response.follow_up_actions:
            print(f"- {action}")

    if args.verbose and response.metadata:
        print("\nMetadata:")
        print(response.metadata.model_dump_json(indent=2, exclude_none=True))
    print()

    if not response.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    main()
