"""
Gallery Page Module

Static photo collection shown on the home page, the search filter applied to
it, the lightbox (overlay) state machine, and the HTML rendering served from
GET /gallery.
"""

from html import escape
from urllib.parse import urlencode

EMPTY_STATE_MESSAGE = 'No matching artwork. Try a different search.'
GALLERY_TITLE = 'Uptick Art Gallery'

_UNSPLASH = 'https://images.unsplash.com'


def _photo(photo_id, title, description):
    return {
        'id': photo_id,
        'title': title,
        'description': description,
        'small': f'{_UNSPLASH}/{photo_id}?auto=format&fit=crop&w=600&q=80',
        'large': f'{_UNSPLASH}/{photo_id}?auto=format&fit=crop&w=2200&q=90',
    }


PHOTOS = (
    _photo('photo-1500530855697-b586d89ba3ee', 'Misty Forest',
           'Soft light over a quiet evergreen canopy.'),
    _photo('photo-1470770841072-f978cf4d019e', 'Mountain Trail',
           'A winding path through alpine terrain.'),
    _photo('photo-1469474968028-56623f02e42e', 'City Glow',
           'Evening light across a lively skyline.'),
    _photo('photo-1494526585095-c41746248156', 'Desert Lines',
           'Warm dunes shaped by the wind.'),
    _photo('photo-1482192596544-9eb780fc7f66', 'Ocean Cliff',
           'Waves rolling into rugged coastline.'),
    _photo('photo-1500534314209-a25ddb2bd429', 'Golden Field',
           'Late sun over a wide open meadow.'),
)


def find_photo(photo_id, photos=PHOTOS):
    for photo in photos:
        if photo['id'] == photo_id:
            return photo
    return None


def filter_photos(photos, query):
    """Case-insensitive substring match on title or description.

    An empty (or whitespace-only) query returns every photo.
    """
    normalized = (query or '').strip().lower()
    if not normalized:
        return list(photos)
    return [
        photo for photo in photos
        if normalized in photo['title'].lower() or normalized in photo['description'].lower()
    ]


class PageState:
    """The bits of document state the lightbox touches."""

    def __init__(self, body_overflow=''):
        self.body_overflow = body_overflow
        self.key_listeners = []

    def add_key_listener(self, listener):
        self.key_listeners.append(listener)

    def remove_key_listener(self, listener):
        if listener in self.key_listeners:
            self.key_listeners.remove(listener)

    def dispatch_key(self, key):
        for listener in list(self.key_listeners):
            listener(key)


class Lightbox:
    """Full-size preview overlay.

    While open, page scrolling is locked and an Escape listener is registered;
    closing restores the overflow value seen at open time and unregisters it.
    """

    def __init__(self, page):
        self.page = page
        self.selected = None
        self._previous_overflow = None

    @property
    def is_open(self):
        return self.selected is not None

    def open(self, photo):
        if self.is_open:
            # Swap the photo but keep the original overflow to restore
            self.selected = photo
            return
        self.selected = photo
        self._previous_overflow = self.page.body_overflow
        self.page.body_overflow = 'hidden'
        self.page.add_key_listener(self.on_key)

    def close(self):
        if not self.is_open:
            return
        self.page.body_overflow = self._previous_overflow
        self.page.remove_key_listener(self.on_key)
        self._previous_overflow = None
        self.selected = None

    def on_key(self, key):
        if key == 'Escape':
            self.close()

    def on_card_key(self, photo, key):
        if key in ('Enter', ' '):
            self.open(photo)

    def on_background_click(self):
        self.close()

    def on_content_click(self):
        # Clicks on the image itself must not bubble to the backdrop
        pass


def _card(photo, query):
    params = {'photo': photo['id']}
    if query:
        params['q'] = query
    title = escape(photo['title'])
    return (
        f'<a class="card" href="?{escape(urlencode(params))}" role="button" tabindex="0" '
        f'aria-label="Open {title} preview">'
        f'<img src="{escape(photo["small"])}" alt="{title}" loading="lazy">'
        f'<h2>{title}</h2>'
        f'<p>{escape(photo["description"])}</p>'
        f'</a>'
    )


def _overlay(photo, query):
    close_href = '?' + urlencode({'q': query}) if query else '?'
    title = escape(photo['title'])
    return (
        f'<div class="overlay" data-close-href="{escape(close_href)}">'
        f'<div class="overlay-content">'
        f'<img src="{escape(photo["large"])}" alt="{title}">'
        f'<a class="close" href="{escape(close_href)}" aria-label="Close image preview">Close</a>'
        f'</div></div>'
    )


def render_gallery(photos=PHOTOS, query='', selected=None):
    """Render the gallery page as a complete HTML document."""
    query = query or ''
    visible = filter_photos(photos, query)

    if visible:
        grid = '<div class="grid">' + ''.join(_card(p, query) for p in visible) + '</div>'
    else:
        grid = f'<p class="empty">{escape(EMPTY_STATE_MESSAGE)}</p>'

    overlay = _overlay(selected, query) if selected else ''
    body_style = ' style="overflow: hidden"' if selected else ''

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{escape(GALLERY_TITLE)}</title>
</head>
<body{body_style}>
<main>
<h1>{escape(GALLERY_TITLE)}</h1>
<p>Welcome to our digital art collection.</p>
<form method="get"><input type="search" name="q" value="{escape(query)}" placeholder="Search"></form>
{grid}
{overlay}
</main>
<script>
document.addEventListener('keydown', function (e) {{
  var overlay = document.querySelector('.overlay');
  if (overlay && e.key === 'Escape') {{ window.location.search = overlay.dataset.closeHref; }}
}});
document.addEventListener('click', function (e) {{
  if (e.target.classList && e.target.classList.contains('overlay')) {{
    window.location.search = e.target.dataset.closeHref;
  }}
}});
</script>
</body>
</html>
"""
