"""Well-known sound event attribute names.

These are the property names understood by libcanberra. Any other string
key is passed through to the backend unchanged.
"""

ATTR_MEDIA_NAME = "media.name"
ATTR_MEDIA_TITLE = "media.title"
ATTR_MEDIA_ARTIST = "media.artist"
ATTR_MEDIA_LANGUAGE = "media.language"
ATTR_MEDIA_FILENAME = "media.filename"
ATTR_MEDIA_ICON = "media.icon"
ATTR_MEDIA_ICON_NAME = "media.icon_name"
ATTR_MEDIA_ROLE = "media.role"

ATTR_EVENT_ID = "event.id"
ATTR_EVENT_DESCRIPTION = "event.description"
ATTR_EVENT_MOUSE_X = "event.mouse.x"
ATTR_EVENT_MOUSE_Y = "event.mouse.y"
ATTR_EVENT_MOUSE_HPOS = "event.mouse.hpos"
ATTR_EVENT_MOUSE_VPOS = "event.mouse.vpos"
ATTR_EVENT_MOUSE_BUTTON = "event.mouse.button"

ATTR_WINDOW_NAME = "window.name"
ATTR_WINDOW_ID = "window.id"
ATTR_WINDOW_ICON = "window.icon"
ATTR_WINDOW_ICON_NAME = "window.icon_name"
ATTR_WINDOW_X11_DISPLAY = "window.x11.display"
ATTR_WINDOW_X11_SCREEN = "window.x11.screen"
ATTR_WINDOW_X11_MONITOR = "window.x11.monitor"
ATTR_WINDOW_X11_XID = "window.x11.xid"

ATTR_APPLICATION_NAME = "application.name"
ATTR_APPLICATION_ID = "application.id"
ATTR_APPLICATION_VERSION = "application.version"
ATTR_APPLICATION_ICON = "application.icon"
ATTR_APPLICATION_ICON_NAME = "application.icon_name"
ATTR_APPLICATION_LANGUAGE = "application.language"
ATTR_APPLICATION_PROCESS_ID = "application.process.id"
ATTR_APPLICATION_PROCESS_BINARY = "application.process.binary"
ATTR_APPLICATION_PROCESS_USER = "application.process.user"
ATTR_APPLICATION_PROCESS_HOST = "application.process.host"

ATTR_CANBERRA_CACHE_CONTROL = "canberra.cache-control"
ATTR_CANBERRA_VOLUME = "canberra.volume"
ATTR_CANBERRA_XDG_THEME_NAME = "canberra.xdg-theme.name"
ATTR_CANBERRA_XDG_THEME_OUTPUT_PROFILE = "canberra.xdg-theme.output-profile"
ATTR_CANBERRA_ENABLE = "canberra.enable"
ATTR_CANBERRA_FORCE_CHANNEL = "canberra.force_channel"
