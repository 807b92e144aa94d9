"""
core/app.py — Pygame debug viewer

Opens a window onto a running ``GameSession`` and draws the plain-data
snapshot it exposes: tile colours, the depletion overlay, fog of war,
entities with health bars, and a small HUD with the message log.

Keys map straight onto session commands:

    arrows / WASD   move (one turn per press)
    space / E       interact with the faced tile
    F               attack the faced tile
    Q               equip the next wearable item in the bag
    R               respawn after death
    F5              save to slot 0
    F6              export the current map to NBT
    F11             fullscreen

    app = App(session, title="Delve", width=960, height=640)
    app.run()
"""

from __future__ import annotations
import pygame

from core.constants import TILE_SIZE, TILE_COLORS, Tile


ENTITY_GLYPHS: dict[str, tuple[str, tuple[int, int, int]]] = {
    "npc": ("@", (120, 200, 255)),
    "enemy": ("e", (230, 70, 60)),
    "spawner": ("S", (200, 60, 200)),
    "portal": ("+", (240, 240, 240)),
    "container": ("C", (220, 180, 60)),
    "crate": ("#", (170, 120, 60)),
    "station": ("&", (180, 180, 220)),
    "item_drop": ("*", (255, 255, 120)),
    "collectible": ("*", (140, 255, 140)),
}

_MOVE_KEYS = {
    pygame.K_UP: (0, -1), pygame.K_w: (0, -1),
    pygame.K_DOWN: (0, 1), pygame.K_s: (0, 1),
    pygame.K_LEFT: (-1, 0), pygame.K_a: (-1, 0),
    pygame.K_RIGHT: (1, 0), pygame.K_d: (1, 0),
}

_FOG = (12, 12, 16)
_HUD_H = 120


class App:
    def __init__(self, session, title: str = "Delve", width: int = 960, height: int = 640):
        pygame.init()
        self.session = session
        self._windowed_size = (width, height)
        # The virtual (design) resolution — all rendering targets this.
        self._virtual_size = (width, height)
        self._render_surface = pygame.Surface((width, height))
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()
        self.running = True
        self.fullscreen = False
        self.fps = 30
        self.dt = 0.0
        self.show_fog = True

        self.font = pygame.font.SysFont("monospace", 14)
        self.font_sm = pygame.font.SysFont("monospace", 11)
        self.font_lg = pygame.font.SysFont("monospace", 18)

    # -- Main loop --

    def run(self):
        while self.running:
            self.dt = self.clock.tick(self.fps) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.VIDEORESIZE and not self.fullscreen:
                    self._windowed_size = (event.w, event.h)
                    self.screen = pygame.display.set_mode(
                        (event.w, event.h), pygame.RESIZABLE)
                elif event.type == pygame.KEYDOWN:
                    self.handle_key(event.key)

            self.session.update(self.dt)
            self.draw(self._render_surface)

            pygame.transform.scale(self._render_surface,
                                   self.screen.get_size(), self.screen)
            pygame.display.flip()

        pygame.quit()

    def handle_key(self, key: int) -> None:
        s = self.session
        if key in _MOVE_KEYS:
            s.move(*_MOVE_KEYS[key])
        elif key in (pygame.K_SPACE, pygame.K_e):
            s.interact()
        elif key == pygame.K_f:
            s.attack()
        elif key == pygame.K_q:
            wearable = [k for k, i in s.state.inventory.items() if i.slot]
            if wearable:
                s.equip(wearable[0])
        elif key == pygame.K_r:
            s.submit("respawn")
        elif key == pygame.K_F5:
            from core.save import save_game_state
            save_game_state(s)
        elif key == pygame.K_F6:
            from core.nbt import save_map_nbt
            if s.current_map is not None:
                save_map_nbt(s.current_map)
        elif key == pygame.K_F1:
            self.show_fog = not self.show_fog
        elif key == pygame.K_F11:
            self.toggle_fullscreen()

    def toggle_fullscreen(self):
        """Switch between windowed and fullscreen (F11)."""
        self.fullscreen = not self.fullscreen
        if self.fullscreen:
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode(
                self._windowed_size, pygame.RESIZABLE)

    # -- Drawing --

    def draw(self, surface: pygame.Surface):
        surface.fill(_FOG)
        snap = self.session.snapshot()
        if not snap:
            self.draw_text(surface, "No active map", 10, 10)
            return

        vw, vh = self._virtual_size
        ox = max(0, (vw - snap["width"] * TILE_SIZE) // 2)
        oy = max(0, (vh - _HUD_H - snap["height"] * TILE_SIZE) // 2)

        explored = snap["explored"] if self.show_fog else None
        draw_tiles(surface, snap["tiles"], snap["overlay"], explored, ox, oy)
        draw_entities(surface, self, snap["entities"], explored, ox, oy)
        draw_player(surface, self, snap["player"], ox, oy)
        self.draw_hud(surface, snap, vh - _HUD_H)

    def draw_hud(self, surface: pygame.Surface, snap: dict, y: int):
        p = snap["player"]
        st = self.session.state
        hh, mm = divmod(snap["time_of_day"], 100)
        self.draw_text(surface,
                       f"{snap['name']} [{snap['map_id']}]  tick {snap['tick']}  "
                       f"{hh:02d}:{mm:02d}  tier {snap['world_tier']}",
                       8, y + 4)
        self.draw_text(surface,
                       f"HP {p['hp']}/{p['max_hp']}  Lv {p['level']}  "
                       f"XP {st.stats.xp}  Gold {st.stats.gold}  "
                       f"Items {len(st.inventory)}",
                       8, y + 22)
        for i, line in enumerate(st.log.messages(5)):
            self.draw_text(surface, line, 8, y + 44 + i * 14,
                           color=(200, 200, 200), font=self.font_sm)

    # -- Convenience --

    def draw_text(self, surface: pygame.Surface, text: str, x: int, y: int,
                  color=(255, 255, 255), font=None):
        """Quick text draw. Returns the rect for layout chaining."""
        f = font or self.font
        img = f.render(text, True, color)
        return surface.blit(img, (x, y))


# ── Tiles ───────────────────────────────────────────────────────────

def draw_tiles(surface: pygame.Surface, tiles: list[list[int]],
               overlay: list[list[int]], explored, ox: int, oy: int):
    effective = {(x, y): t for x, y, t in overlay}
    for row, line in enumerate(tiles):
        for col, tile_id in enumerate(line):
            if explored is not None and not explored[row][col]:
                continue
            tile_id = effective.get((col, row), tile_id)
            color = TILE_COLORS.get(Tile(tile_id), (255, 0, 255))
            rect = pygame.Rect(ox + col * TILE_SIZE, oy + row * TILE_SIZE,
                               TILE_SIZE, TILE_SIZE)
            pygame.draw.rect(surface, color, rect)


# ── Entities (glyphs + health bars) ─────────────────────────────────

def draw_entities(surface: pygame.Surface, app: App, entities: list[dict],
                  explored, ox: int, oy: int):
    for ent in entities:
        x, y = ent["x"], ent["y"]
        if explored is not None and not explored[y][x]:
            continue
        char, color = ENTITY_GLYPHS.get(ent["kind"], ("?", (255, 0, 255)))
        if ent["anim"] == "hurt":
            color = (255, 255, 255)
        sx = ox + x * TILE_SIZE
        sy = oy + y * TILE_SIZE
        app.draw_text(surface, char, sx + 7, sy + 2, color=color, font=app.font_lg)

        if "hp" in ent and ent["hp"] < ent["max_hp"]:
            _health_bar(surface, sx, sy, ent["hp"] / max(1, ent["max_hp"]))


def draw_player(surface: pygame.Surface, app: App, player: dict, ox: int, oy: int):
    sx = ox + player["x"] * TILE_SIZE
    sy = oy + player["y"] * TILE_SIZE
    color = {"hurt": (255, 80, 80), "dodge": (120, 220, 255)}.get(
        player["anim"], (255, 255, 100))
    app.draw_text(surface, "@", sx + 7, sy + 2, color=color, font=app.font_lg)


def _health_bar(surface: pygame.Surface, sx: int, sy: int, ratio: float):
    bar_w = TILE_SIZE - 4
    bar_h = 3
    bar_x = sx + 2
    bar_y = sy - 5
    ratio = max(0.0, ratio)
    pygame.draw.rect(surface, (40, 40, 40), (bar_x, bar_y, bar_w, bar_h))
    if ratio > 0.5:
        fill = (50, 200, 50)
    elif ratio > 0.25:
        fill = (220, 200, 50)
    else:
        fill = (220, 50, 50)
    pygame.draw.rect(surface, fill, (bar_x, bar_y, max(1, int(bar_w * ratio)), bar_h))
    pygame.draw.rect(surface, (80, 80, 80), (bar_x, bar_y, bar_w, bar_h), 1)
