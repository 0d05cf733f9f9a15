#!/usr/bin/env python3
"""
Doctor Responder - Main Entry Point
===================================

This is the main entry point for the Doctor Responder. It provides a
command-line interface for chatting with the doctor in various modes.

Usage:
    python main.py                  # Chat in the console
    python main.py --web            # Start web UI
    python main.py --tui            # Start terminal UI
    python main.py --test "Hello"   # Reply to a single message
    python main.py --rules          # List rules in matching order
    python main.py --setup          # Write default config and rules
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, create_default_config, save_config, Config
from core.logging import setup_logging, get_logger
from core.exceptions import DoctorError

logger = get_logger("main")

EXIT_WORDS = {"quit", "exit"}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Doctor Responder - a rule-based conversational responder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                          Chat in the console
  python main.py --web --port 9000        Start web UI on port 9000
  python main.py --tui                    Start terminal UI
  python main.py --test "I feel sad"      Reply to one message
  python main.py --rules-file rules.yaml  Use custom rules
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--chat",
        action="store_true",
        help="Chat in the console (default)"
    )
    mode_group.add_argument(
        "--web",
        action="store_true",
        help="Start web UI server"
    )
    mode_group.add_argument(
        "--tui",
        action="store_true",
        help="Start terminal UI"
    )
    mode_group.add_argument(
        "--test",
        nargs="+",
        metavar="MESSAGE",
        help="Reply to each MESSAGE in turn, sharing one conversation"
    )
    mode_group.add_argument(
        "--rules",
        action="store_true",
        help="List rules in matching order"
    )
    mode_group.add_argument(
        "--setup",
        action="store_true",
        help="Write default config.yaml and rules.yaml"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--rules-file",
        type=str,
        metavar="PATH",
        help="Path to a YAML rules file"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for web UI (default: from config, 8080)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host for web UI (default: from config, 127.0.0.1)"
    )
    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Print replies at once instead of typing them out"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser.parse_args(argv)


def run_setup(config_dir: Optional[str] = None) -> None:
    """Write a default configuration and an editable copy of the rules."""
    from rules.loader import write_default_rules

    config = create_default_config(config_dir)
    rules_path = write_default_rules(Path(config.config_dir) / "rules.yaml")

    config.responder.rules_file = str(rules_path)
    save_config(config)

    print(f"✓ Configuration written to {Path(config.config_dir) / 'config.yaml'}")
    print(f"✓ Rules written to {rules_path}")


def run_list_rules(config: Config) -> None:
    """Print rules in the order they are tried."""
    from services.responder import load_declarations
    from rules.loader import build_rule_set

    declarations = load_declarations(config)
    rule_set = build_rule_set(declarations)

    print(f"\nRules ({declarations.source})")
    print("-" * 50)
    for rule in rule_set:
        print(f"  [{rule.priority:>3}] {rule.keyword}")
        for decomposition in rule.decompositions:
            print(f"        /{decomposition.regex.pattern}/")
            for template in decomposition.responses:
                print(f"          - {template}")

    print("\nFallbacks")
    print("-" * 50)
    for reply in declarations.fallbacks:
        print(f"  - {reply}")
    print()


def run_test_messages(config: Config, messages: List[str]) -> None:
    """Reply to messages in one conversation and show how each reply was made."""
    from services.responder import create_responder

    responder = create_responder(config)

    for message in messages:
        result = responder.respond(message)
        print(f"\n> {message}")
        print(f"  Normalized: {result.normalized!r}")
        print(f"  Source:     {result.source}" + (f" ({result.keyword})" if result.keyword else ""))
        print(f"  Reply:      {result.response}")


def run_console_chat(config: Config, paced: bool = True) -> None:
    """Interactive console conversation."""
    from services.pacing import type_out
    from services.responder import create_responder

    responder = create_responder(config)
    ui = config.ui

    print(f"\n{config.app_name}")
    print(ui.hints[0])
    print("Type 'quit' to leave.\n")

    def write(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    while True:
        try:
            message = input("you> ")
        except EOFError:
            print()
            break

        if message.strip().lower() in EXIT_WORDS:
            break
        if not message.strip():
            continue

        reply = responder.reply(message)
        write("doctor> ")
        if paced:
            type_out(reply, write, interval=ui.stream_interval)
        else:
            write(reply)
        write("\n")


def run_web_ui(config: Config, host: str, port: int, debug: bool) -> None:
    """Run the web UI server."""
    from ui.web.app import run_app

    print(f"\nStarting Web UI on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    run_app(host=host, port=port, debug=debug, config=config)


def run_terminal_ui(config: Config) -> None:
    """Run the terminal UI."""
    from ui.terminal.app import run_tui

    run_tui(config=config)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        if args.setup:
            run_setup()
            return 0

        config = load_config(args.config)

        if args.rules_file:
            config.responder.rules_file = args.rules_file
            config.responder.validate()
        if args.debug:
            config.debug = True

        setup_logging(
            log_dir=config.log_dir or None,
            log_level="DEBUG" if config.debug else ("INFO" if args.web else "WARNING"),
            console_output=True
        )

        if args.web:
            host = args.host or config.ui.web_host
            port = args.port or config.ui.web_port
            run_web_ui(config, host, port, config.debug)
        elif args.tui:
            run_terminal_ui(config)
        elif args.test:
            run_test_messages(config, args.test)
        elif args.rules:
            run_list_rules(config)
        else:
            run_console_chat(config, paced=not args.no_delay)

        return 0

    except DoctorError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
