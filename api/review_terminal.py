"""
Interactive terminal review loop.

Shows due cards one at a time (English first, 'f' flips to Cantonese and
Jyutping) and reschedules each card from the chosen answer:
  d = difficult (-1), s = same (0), e = easy (+1), f = flip, q = quit

Uses the card store selected by CARD_STORE_BACKEND.
"""
import sys
import logging
from sqlmodel import Session
from app.core.database import engine, init_db
from app.core.config import settings
from app.schemas.vocab_card import VocabCard
from app.services.card_repository import build_card_repository
from app.services.review_session import Empty, Error, Ready, ReviewSession
from app.services.srs_service import ReviewAction, MAX_PROFICIENCY_LEVEL

logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

KEY_ACTIONS = {
    'd': ReviewAction.DIFFICULT,
    's': ReviewAction.SAME,
    'e': ReviewAction.EASY,
}


def render_card(card: VocabCard, flipped: bool, due_count: int) -> str:
    """Render one side of a card plus the status line."""
    lines = [f"Level: {card.proficiency_level}", ""]
    if flipped:
        lines.append(f"  {card.cantonese}")
        lines.append(f"  {card.jyutping}")
    else:
        lines.append(f"  {card.english}")
    lines.append("")
    lines.append(f"Proficiency: {card.proficiency_level} / {MAX_PROFICIENCY_LEVEL}    Cards Due: {due_count}")
    return "\n".join(lines)


def run(session: ReviewSession, read_key=input, write=print) -> None:
    """Run the review loop until the queue is empty, an error occurs, or the user quits."""
    write("Loading vocabulary...")
    session.refresh()
    flipped = False
    # Computed result whose save failed; retried as-is until it is stored
    pending = None

    while True:
        state = session.state
        if isinstance(state, Error):
            write(f"Error: {state.reason}")
            if pending is not None:
                retry = read_key("Press r to retry saving, anything else to quit: ").strip().lower()
                if retry != 'r':
                    return
                outcome = session.retry(pending)
                if outcome.saved:
                    pending = None
                continue
            retry = read_key("Press r to retry, anything else to quit: ").strip().lower()
            if retry != 'r':
                return
            session.refresh()
            continue
        if isinstance(state, Empty):
            write("No cards due for review! Enjoy your break.")
            return
        if not isinstance(state, Ready):
            session.refresh()
            continue

        write("")
        write(render_card(state.current_card, flipped, session.due_count))
        key = read_key("[d]ifficult  [s]ame  [e]asy  [f]lip  [q]uit > ").strip().lower()

        if key == 'q':
            return
        if key == 'f':
            flipped = not flipped
            continue
        if key not in KEY_ACTIONS:
            write("Unknown key.")
            continue

        outcome = session.submit(KEY_ACTIONS[key])
        flipped = False
        if not outcome.saved:
            pending = outcome.result


def main() -> None:
    if settings.card_store_backend.lower() == 'database':
        init_db()
    with Session(engine) as db_session:
        repository = build_card_repository(db_session)
        run(ReviewSession(repository))


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, EOFError):
        print()
        sys.exit(0)
