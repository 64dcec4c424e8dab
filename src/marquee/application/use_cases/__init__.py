from .catalog import CatalogAggregator
from .launch_player import PlaybackLauncher
from .playback import PlaybackUseCase
from .resolve_stream import StreamResolver

__all__ = ["CatalogAggregator", "PlaybackLauncher", "PlaybackUseCase", "StreamResolver"]
