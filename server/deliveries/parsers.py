"""
Request body parsers for inbound webhooks.
"""
from django.conf import settings
from rest_framework.exceptions import ParseError
from rest_framework.parsers import BaseParser


class PlainTextParser(BaseParser):
    """Parses text/plain bodies into a string payload."""

    media_type = 'text/plain'

    def parse(self, stream, media_type=None, parser_context=None):
        parser_context = parser_context or {}
        encoding = parser_context.get('encoding', settings.DEFAULT_CHARSET)
        try:
            return stream.read().decode(encoding)
        except UnicodeDecodeError as e:
            raise ParseError(f'Plain text decode error - {e}')
