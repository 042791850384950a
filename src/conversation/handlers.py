"""
Step handlers for the booking dialogue.

Each ConversationStep has exactly one handler. A handler looks at the
session (whose data already holds this turn's merged extraction) and decides
the reply, the next step and any action the caller must run.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from nlu.extractor import ExtractedInfo
from response.generator import ResponseGenerator
from .context import ConversationSession
from .states import ConversationStep, RequiredAction


@dataclass
class StepOutcome:
    """What a handler decided for one turn."""
    reply: str
    next_step: ConversationStep
    required_action: Optional[RequiredAction] = None


class StepHandler:
    """
    Base class for the handler of a single step.

    Handlers may write to ``session.data`` but never change ``session.step``;
    the engine applies ``next_step`` after the handler returns.
    """

    step: ConversationStep

    def handle(
        self,
        session: ConversationSession,
        extracted: ExtractedInfo,
        text: str,
        responder: ResponseGenerator,
    ) -> StepOutcome:
        raise NotImplementedError

    def stay(self, reply: str) -> StepOutcome:
        return StepOutcome(reply=reply, next_step=self.step)


class GreetingHandler(StepHandler):
    """Only this turn's extraction counts; a fresh session has no prior data to check."""

    step = ConversationStep.GREETING

    def handle(self, session, extracted, text, responder):
        if extracted.number_of_guests is not None:
            return StepOutcome(
                reply=responder.generate("confirm_guests", guests=extracted.number_of_guests),
                next_step=ConversationStep.AWAITING_DATE,
            )
        return StepOutcome(
            reply=responder.generate("greeting"),
            next_step=ConversationStep.AWAITING_GUESTS,
        )


class AwaitingGuestsHandler(StepHandler):
    step = ConversationStep.AWAITING_GUESTS

    def handle(self, session, extracted, text, responder):
        guests = session.data.number_of_guests
        if guests is not None:
            return StepOutcome(
                reply=responder.generate("confirm_guests", guests=guests),
                next_step=ConversationStep.AWAITING_DATE,
            )
        return self.stay(responder.reprompt(self.step.value))


class AwaitingDateHandler(StepHandler):
    """Advancing asks the caller to look up the weather for the new date."""

    step = ConversationStep.AWAITING_DATE

    def handle(self, session, extracted, text, responder):
        data = session.data
        if data.date_text and data.parsed_date:
            return StepOutcome(
                reply=responder.generate("confirm_date", date=data.date_text),
                next_step=ConversationStep.AWAITING_TIME,
                required_action=RequiredAction.FETCH_WEATHER,
            )
        return self.stay(responder.reprompt(self.step.value))


class AwaitingTimeHandler(StepHandler):
    step = ConversationStep.AWAITING_TIME

    def handle(self, session, extracted, text, responder):
        if session.data.time_text:
            return StepOutcome(
                reply=responder.generate("confirm_time", time=session.data.time_text),
                next_step=ConversationStep.AWAITING_CUISINE,
            )
        return self.stay(responder.reprompt(self.step.value))


class AwaitingCuisineHandler(StepHandler):
    step = ConversationStep.AWAITING_CUISINE

    def handle(self, session, extracted, text, responder):
        cuisine = session.data.cuisine_preference
        if cuisine is not None:
            return StepOutcome(
                reply=responder.generate("confirm_cuisine", cuisine=cuisine),
                next_step=ConversationStep.AWAITING_SPECIAL_REQUESTS,
            )
        return self.stay(responder.reprompt(self.step.value))


class AwaitingSpecialRequestsHandler(StepHandler):
    """
    Collects requests until the utterance contains "no" or "proceed".

    The check is a plain substring test on the lowercased utterance, so
    words such as "know" or "nothing" also end the step.
    """

    step = ConversationStep.AWAITING_SPECIAL_REQUESTS

    def handle(self, session, extracted, text, responder):
        lowered = text.lower()
        if "no" in lowered or "proceed" in lowered:
            return StepOutcome(
                reply=responder.booking_summary(session.data.snapshot()),
                next_step=ConversationStep.AWAITING_NAME,
            )

        if extracted.special_requests:
            session.data.special_requests = ", ".join(extracted.special_requests)
            return self.stay(responder.generate("special_requests_noted"))

        session.data.special_requests = text
        return self.stay(responder.generate("special_requests_verbatim"))


class AwaitingNameHandler(StepHandler):
    """Any utterance completes the dialogue; the caller then creates the booking."""

    step = ConversationStep.AWAITING_NAME

    def handle(self, session, extracted, text, responder):
        session.data.customer_name = extracted.customer_name or text.strip()
        return StepOutcome(
            reply=responder.generate("finalizing", name=session.data.customer_name),
            next_step=self.step,
            required_action=RequiredAction.CREATE_BOOKING,
        )


STEP_HANDLERS: Dict[ConversationStep, StepHandler] = {
    handler.step: handler
    for handler in (
        GreetingHandler(),
        AwaitingGuestsHandler(),
        AwaitingDateHandler(),
        AwaitingTimeHandler(),
        AwaitingCuisineHandler(),
        AwaitingSpecialRequestsHandler(),
        AwaitingNameHandler(),
    )
}
