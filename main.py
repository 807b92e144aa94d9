"""
main.py — Bootstrap

1. Load tuning constants and content tables
2. Resume the save in slot 0, or lay out a fresh overworld
3. Open the debug viewer and run

    python main.py            # resume or new game
    python main.py --new      # ignore any save
"""

import sys

from core import tuning
from core.app import App
from core.content import Content
from core.save import load_game_state
from logic.loot_tables import LootTableManager
from logic.session import GameSession


def main():
    tuning.load()
    content = Content.load()
    tables = LootTableManager.from_file()

    saved = None if "--new" in sys.argv else load_game_state()
    if saved is not None:
        registry, state = saved
        session = GameSession(content, tables, registry=registry, state=state)
        if session.current_map is None:
            print(f"[MAIN] Saved map {state.map_id!r} missing, returning to town")
            session.place_in_town()
    else:
        session = GameSession.new_game(content, tables)

    print(f"[MAIN] {session.registry.debug_dump()}")
    App(session, title="Delve", width=960, height=640).run()


if __name__ == "__main__":
    main()
