# common.py - pygame drawing helpers shared by the Klondike scenes
import pygame

from klondike.cards import RANK_TO_TEXT, Card, is_red

# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1280, 800
GREEN_TABLE = (2, 100, 40)
TABLE_BG = GREEN_TABLE

CARD_W, CARD_H = 100, 140
CARD_RADIUS = 10
CARD_GAP_X = 18
CARD_GAP_Y = 26
TABLEAU_FAN_Y = 28
TOP_BAR_H = 60

# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 20, 20)
BLUE = (34, 96, 200)
GOLD = (230, 190, 80)
LIGHT = (220, 220, 220)
BANNER = (255, 255, 180)

# Fonts are initialized via setup_fonts() AFTER pygame.init() in __main__.py
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_TITLE = None
FONT_CORNER_RANK = None

_card_face_cache = {}
_card_back_cache = None


def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_TITLE, FONT_CORNER_RANK
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_TITLE = pygame.font.SysFont(FONT_NAME, 44, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(FONT_NAME, 28, bold=True)


def size_to_dims(size_name: str):
    size_name = (size_name or "Medium").capitalize()
    if size_name == "Small":
        return 75, 105
    if size_name == "Large":
        return 150, 210
    return 100, 140


def apply_card_size(size_name: str):
    global CARD_W, CARD_H, TABLEAU_FAN_Y
    CARD_W, CARD_H = size_to_dims(size_name)
    TABLEAU_FAN_Y = max(18, int(CARD_H * 0.2))
    invalidate_card_caches()


def invalidate_card_caches():
    global _card_face_cache, _card_back_cache
    _card_face_cache = {}
    _card_back_cache = None


def draw_suit_shape(surface, center, suit, color, size=42):
    x, y = center
    if suit == "diamonds":
        half = size//2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit == "hearts":
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        tri = [(x - 2*r, y - r), (x + 2*r, y - r), (x, y + 2*r)]
        pygame.draw.polygon(surface, color, tri)
    elif suit == "spades":
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        tri = [(x - 2*r, y), (x + 2*r, y), (x, y - 2*r)]
        pygame.draw.polygon(surface, color, tri)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))
    else:  # clubs
        r = size//3
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r//3), r)
        pygame.draw.circle(surface, color, (x + r, y + r//3), r)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))


def get_card_surface(card: Card):
    if not card.face_up:
        return get_back_surface()
    key = (card.suit, card.rank)
    if key in _card_face_cache:
        return _card_face_cache[key]
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
    color = RED if is_red(card.suit) else BLACK
    margin = 8
    rtxt = FONT_CORNER_RANK.render(RANK_TO_TEXT[card.rank], True, color)
    surf.blit(rtxt, (margin, margin))
    r180 = pygame.transform.rotate(rtxt, 180)
    surf.blit(r180, (CARD_W - margin - r180.get_width(), CARD_H - margin - r180.get_height()))
    draw_suit_shape(surf, (CARD_W//2, CARD_H//2), card.suit, color, size=max(24, CARD_W//2))
    _card_face_cache[key] = surf
    return surf


def get_back_surface():
    global _card_back_cache
    if _card_back_cache is not None:
        return _card_back_cache
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
    inset = 8
    inner_rect = pygame.Rect(inset, inset, CARD_W-2*inset, CARD_H-2*inset)
    pygame.draw.rect(surf, BLUE, inner_rect, border_radius=8)
    for i in range(-CARD_H, CARD_W, 12):
        pygame.draw.line(surf, LIGHT, (i, 8), (i+CARD_H, CARD_H-8), 1)
    _card_back_cache = surf
    return surf


# ---------- Piles ----------
class PileView:
    """Screen geometry for one pile; the cards themselves live in the engine."""

    def __init__(self, pile_type, pile_index=None, x=0, y=0, fan_y=0):
        self.pile_type = pile_type
        self.pile_index = pile_index
        self.x, self.y = x, y
        self.fan_y = fan_y

    def rect_for_index(self, idx):
        return pygame.Rect(self.x, self.y + idx * self.fan_y, CARD_W, CARD_H)

    def top_rect(self, count):
        if count <= 0:
            return pygame.Rect(self.x, self.y, CARD_W, CARD_H)
        return self.rect_for_index(count - 1)

    def area(self, count):
        """The whole region covered by the pile, used as the drop zone."""
        return pygame.Rect(self.x, self.y, CARD_W, CARD_H).union(self.top_rect(count))

    def draw(self, screen, cards):
        if not cards:
            pygame.draw.rect(screen, (255, 255, 255), (self.x, self.y, CARD_W, CARD_H),
                             border_radius=CARD_RADIUS, width=2)
        for i, c in enumerate(cards):
            r = self.rect_for_index(i)
            screen.blit(get_card_surface(c), (r.left, r.top))

    def hit(self, pos, count):
        """Index of the card under pos, -1 for an empty pile's outline, None for a miss."""
        if count <= 0:
            return -1 if pygame.Rect(self.x, self.y, CARD_W, CARD_H).collidepoint(pos) else None
        for i in reversed(range(count)):
            if self.rect_for_index(i).collidepoint(pos):
                return i
        return None


# ---------- UI ----------
class Button:
    def __init__(self, text, x, y, w=120, h=36, on_click=None, enabled=None):
        self.text = text
        self.rect = pygame.Rect(x, y, w, h)
        self.on_click = on_click
        self.enabled = enabled

    def is_enabled(self):
        return True if self.enabled is None else bool(self.enabled())

    def draw(self, screen, hover=False):
        enabled = self.is_enabled()
        col = GOLD if hover and enabled else ((200, 200, 200) if enabled else (150, 150, 150))
        pygame.draw.rect(screen, col, self.rect, border_radius=10)
        pygame.draw.rect(screen, BLACK, self.rect, 2, border_radius=10)
        t = FONT_SMALL.render(self.text, True, BLACK)
        screen.blit(t, (self.rect.centerx - t.get_width() // 2,
                        self.rect.centery - t.get_height() // 2))

    def hovered(self, mouse_pos):
        return self.rect.collidepoint(mouse_pos)

    def click(self, mouse_pos):
        if self.hovered(mouse_pos) and self.is_enabled() and self.on_click:
            self.on_click()
            return True
        return False


# ---------- Base Scene ----------
class Scene:
    def __init__(self, app):
        self.app = app
        self.quit_requested = False
    def handle_event(self, e): pass
    def update(self, dt): pass
    def draw(self, screen): pass
