import re
import markdown as _md


def slugify(text):
    """Lowercase, replace every run of non-alphanumerics with one hyphen, trim hyphens.

    'The Lost Mines!' → 'the-lost-mines'
    """
    text = (text or '').strip().lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def unique_slug(base, exists):
    """Return base, or base-1, base-2, ..., whichever exists() reports free first."""
    slug = base
    counter = 1
    while exists(slug):
        slug = f'{base}-{counter}'
        counter += 1
    return slug


def render_markdown(text):
    """Convert GM-entered Markdown (session notes, recaps) to HTML."""
    if not text:
        return ''
    return _md.markdown(text, extensions=['nl2br', 'tables', 'fenced_code'])


def escape_like(text):
    """Escape LIKE wildcards so user input is matched literally (use with escape='\\')."""
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
