"""
Main entry point for the restaurant booking agent.

Runs a text console: every line typed is handled as one utterance of a
booking conversation. Type "reset" to start over and "quit" to leave.
"""
import argparse
import sys
import uuid
from typing import List, Optional

from loguru import logger

from agent.orchestrator import BookingAgent
from config import get_settings
from conversation.state_manager import DialogueEngine
from error_handling.exceptions import InputValidationError
from error_handling.logging_config import init_logging
from models.database import create_tables, get_db_session, init_db
from response.generator import ResponseGenerator
from services.booking_service import BookingService
from services.notification_service import LoggingEventPublisher
from services.weather_service import WeatherService

EXIT_WORDS = {"quit", "exit", "bye"}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Book a restaurant table by chatting.")
    parser.add_argument("--session-id", default=None, help="Conversation id (default: random)")
    parser.add_argument("--environment", default=None,
                        help="development, production or test (default: ENVIRONMENT setting)")
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    parser.add_argument("--no-weather", action="store_true", help="Skip weather lookups")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the booking console.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    settings = get_settings()

    init_logging(args.environment or settings.environment, settings.log_level)
    logger.info("=" * 60)
    logger.info("Restaurant Booking Agent")
    logger.info("=" * 60)

    init_db(args.database_url)
    create_tables()

    weather_service = None
    if not args.no_weather:
        if settings.openweather_api_key:
            weather_service = WeatherService()
        else:
            logger.warning("OPENWEATHER_API_KEY not set; weather lookups disabled")

    session_id = args.session_id or uuid.uuid4().hex[:12]

    try:
        with get_db_session() as db:
            engine = DialogueEngine(
                booking_store=BookingService(db),
                responder=ResponseGenerator(restaurant_name=settings.restaurant_name),
                default_booking_time=settings.default_booking_time,
            )
            agent = BookingAgent(engine, weather_service, LoggingEventPublisher())
            return run_console(agent, session_id)
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        return 130
    finally:
        if weather_service is not None:
            weather_service.close()
        logger.info("Application shutting down...")


def run_console(agent: BookingAgent, session_id: str) -> int:
    """
    Read utterances until the booking is made or the user leaves.

    Returns:
        0 if a booking was created, 1 otherwise
    """
    print("Hi! Tell me about the table you'd like to book. (type 'quit' to leave, 'reset' to start over)")

    while True:
        try:
            text = input("> ").strip()
        except EOFError:
            return 1

        if text.lower() in EXIT_WORDS:
            return 1
        if text.lower() == "reset":
            agent.reset(session_id)
            print(agent.engine.responder.generate("session_reset"))
            continue

        try:
            reply = agent.handle_utterance(session_id, text)
        except InputValidationError as e:
            logger.debug(f"Ignoring input: {e.message}")
            continue

        print(reply.reply_text)
        if reply.completed:
            logger.info(f"Booking completed: {reply.booking.booking_id}")
            return 0


if __name__ == "__main__":
    sys.exit(main())
