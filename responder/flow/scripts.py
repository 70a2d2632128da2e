"""Fixed conversation scripts: ordered steps sent with strict causal ordering."""

from __future__ import annotations

from dataclasses import dataclass

from responder.models import OutboundMessage, QuickReplyDefinition, UserProfile


@dataclass(frozen=True)
class TextStep:
    """Literal text; ``{first_name}`` is filled from the user profile."""

    text: str

    def render(
        self,
        recipient_id: str,
        definition: QuickReplyDefinition,
        profile: UserProfile | None,
    ) -> OutboundMessage:
        name = profile.first_name if profile and profile.first_name else "there"
        return OutboundMessage.text(recipient_id, self.text.format(first_name=name))


@dataclass(frozen=True)
class CatalogStep:
    """Forward the resolved catalog definition for the script's use case."""

    def render(
        self,
        recipient_id: str,
        definition: QuickReplyDefinition,
        profile: UserProfile | None,
    ) -> OutboundMessage:
        return OutboundMessage.from_definition(recipient_id, definition)


Step = TextStep | CatalogStep


@dataclass(frozen=True)
class ConversationScript:
    name: str
    steps: tuple[Step, ...]
    needs_profile: bool = False


START = ConversationScript(
    name="start",
    needs_profile=True,
    steps=(
        TextStep("Hi {first_name}, thank you for reaching out. I am here to help you. "),
        TextStep(
            "Please remember that this is not a crisis helpline. If you are in immediate "
            "danger, we strongly urge you to call 100 to reach the national police helpline."
        ),
        CatalogStep(),
    ),
)

COUNSELLORS = ConversationScript(
    name="counsellors",
    steps=(
        TextStep("Here is a list of counselling services in your area."),
        TextStep(
            "Parivarthan\nhttp://www.parivarthan.org/ \n+917676602602\nychelpline@gmail.com \n\n"
            "Innersight\nhttp://www.innersight.in/ \ncounsellors@innersight.in"
        ),
    ),
)

HARASSMENT_INFO = ConversationScript(
    name="harassment-info",
    needs_profile=True,
    steps=(
        TextStep(
            "I'm sorry to hear that.\nSexual Harassment at the Workplace in India covers "
            "physical contact and advances; a demand or request for sexual favours; making "
            "sexually coloured remarks; showing pornography; any other unwelcome physical, "
            "verbal or non-verbal conduct of sexual nature; at the workplace."
        ),
        TextStep(
            "Here is a handbook that can help you understand how you are empowered to act in "
            "this situation.\nhttps://goo.gl/SKCGq \nYou can also contact POSH At Work for "
            "help.\n http://www.poshatwork.com/"
        ),
        CatalogStep(),
    ),
)


@dataclass(frozen=True)
class Escalation:
    """Single-button template pointing at a hard-coded phone number."""

    text: str
    title: str
    phone_number: str

    def render(self, recipient_id: str) -> OutboundMessage:
        return OutboundMessage.button_template(
            recipient_id,
            self.text,
            [{"type": "phone_number", "title": self.title, "payload": self.phone_number}],
        )


ESCALATIONS: dict[str, Escalation] = {
    "suicidalThoughtsYes": Escalation(
        text="These people here will help you.",
        title="National Helpline",
        phone_number="181",
    ),
    "panicButton": Escalation(
        text="You will get help here.",
        title="Police",
        phone_number="100",
    ),
}
