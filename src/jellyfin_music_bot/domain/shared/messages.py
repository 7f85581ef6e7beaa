"""Centralized message constants for error messages, validation, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Configuration Errors
    INVALID_SERVER_URL = "Jellyfin server URL must start with http:// or https://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Voice Errors
    VOICE_ADAPTER_REQUIRED = "A voice adapter is required to join a voice channel"
    VOICE_ADAPTER_NOT_GUILD = "Voice adapter must be a discord.Guild"
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    JELLYFIN_API_KEY_REQUIRED = "JELLYFIN__API_KEY environment variable is required"
    JELLYFIN_USER_ID_REQUIRED = "JELLYFIN__USER_ID environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Voice Connection
    VOICE_STATE_CHANGED = "Voice connection for guild %s: %s -> %s"
    VOICE_STATE_LISTENER_ERROR = "Voice state listener failed for guild %s"
    VOICE_JOIN_INFLIGHT = "Joining in-flight voice connect for guild %s"
    VOICE_CONNECT_FAILED = "Failed to connect to channel %s in guild %s: %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s in guild %s"
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_CLIENT_ERROR = "Voice client error: %r"
    VOICE_CONNECT_UNEXPECTED = "Unexpected error connecting to voice in guild %s"
    VOICE_DISCONNECTED_WAITING = "Voice disconnected in guild %s, waiting for reconnect"
    VOICE_RECONNECTING = "Voice reconnecting in guild %s"
    VOICE_RECONNECT_FAILED = "Voice in guild %s did not reconnect within %.1fs"
    VOICE_CLEANUP_ERROR = "Error during voice connection cleanup"
    VOICE_CONNECTION_CLEANED_UP = "Cleaned up voice connection for guild %s"
    VOICE_NOT_CONNECTED = "No voice connection for guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"

    # Playlist Selection
    PLAYLIST_SELECTED = "Selected playlist %s for guild %s"
    PLAYLIST_CLEARED = "Cleared playlist selection for guild %s"
    PLAYLIST_EMPTY = "Playlist %s has no items, idling guild %s"

    # Playback Loop
    PLAYBACK_NO_PLAYLIST = "No playlist selected for guild %s"
    PLAYBACK_ALREADY_LOADING = "Guild %s is already loading a track"
    PLAYBACK_ITERATION_ABORTED = "Session for guild %s changed mid-iteration, aborting"
    PLAYBACK_ITERATION_FAILED = "Playback iteration failed for guild %s"
    PLAYBACK_ADVANCE_SCHEDULED = "Next track for guild %s in %.1fs"
    PLAYBACK_STARTED = "Now playing '%s' in guild %s"
    PLAYBACK_ERROR = "Player error in guild %s: %s"
    PLAYBACK_AUTO_LEAVE = "No playlist for guild %s after track end, leaving voice"
    PLAYBACK_IGNORING_CALLBACK = "Ignoring end callback for replaced source in guild %s"
    TRACK_SELECTED = "Selected '%s' by %s for guild %s"
    TRACK_DETAILS = "Album: %s | Duration: %s | %s | %s | container=%s bitrate=%skbps"
    TRACK_FINISHED = "Track finished in guild %s"
    TRACK_ENDED = "Source ended in guild %s (error=%s)"

    # Playback Controls
    PLAYBACK_STOPPED = "Stopped playback for guild %s"
    PLAYBACK_PAUSED = "Paused playback for guild %s"
    PLAYBACK_RESUMED = "Resumed playback for guild %s"
    TRACK_SKIPPED = "Skipped track for guild %s"

    # Player Lifecycle
    PLAYER_CREATED = "Created audio player for guild %s"
    PLAYER_SIGNAL_HANDLER_ERROR = "Error handling player signal for guild %s"
    SESSION_CLEANED_UP = "Cleaned up playback session for guild %s"

    # Stream Buffer
    STREAM_PREFILL_PROGRESS = "Pre-fill: %s / %s (%.1f%%)"
    STREAM_PREFILL_COMPLETE = "Pre-filled %s in %.0fms"
    STREAM_READ_FAILED = "Stream read failed for %s: %s"

    # Catalog
    CATALOG_PLAYLISTS_FETCHED = "Fetched %s playlists"
    CATALOG_ITEMS_FETCHED = "Fetched %s items for playlist %s"
    CATALOG_REQUEST_FAILED = "Catalog request '%s' failed: %s"
    CATALOG_RESPONSE_INVALID = "Catalog response for '%s' could not be parsed: %s"

    # Commands & Views
    COMMAND_FETCH_PLAYLISTS_FAILED = "Failed to fetch playlists for guild %s"
    COMMAND_START_PLAYBACK_FAILED = "Failed to start playlist %s in guild %s"
    COMMAND_BACKGROUND_START_FAILED = "Background playback start failed for guild %s"
    CONTROL_BUTTON_PRESSED = "Control '%s' pressed in guild %s"
    CONTROL_BUTTON_FAILED = "Error handling control '%s' in guild %s"
    VIEW_EDIT_FAILED = "Failed to edit view message on timeout"

    # Now Playing Notices
    NOTIFIER_ARTWORK_FAILED = "Failed to fetch artwork from %s: %s"
    NOTIFIER_SEND_FAILED = "Failed to send now-playing notice for '%s': %s"

    # Bot Lifecycle
    BOT_STARTING = "Starting Jellyfin Music Bot in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_CONFIG_INVALID = "Invalid configuration: %s"
    BOT_JELLYFIN_TARGET = "Streaming from Jellyfin at %s as user %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"

    # Cog Loading
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"

    # Command Sync
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"
    BOT_SYNC_ON_STARTUP_FAILED = "Failed to sync commands on startup: %s"

    # Error Handling
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"

    # Container
    CONTAINER_CLOSE_ERROR = "Error closing %s: %s"


class DiscordUIMessages:
    """User-facing Discord messages."""

    # Error Messages
    ERROR_GENERIC = "❌ An unexpected error occurred. Please try again later."
    ERROR_FETCH_PLAYLISTS = "❌ Failed to fetch playlists."
    ERROR_COULD_NOT_JOIN_VOICE = "❌ Could not join the voice channel."
    ERROR_START_PLAYBACK = "❌ Failed to start playback."

    # Playlist Messages
    PLAYLIST_SELECT_PROMPT = "🎶 Choose a playlist to play:"
    PLAYLIST_SELECT_PLACEHOLDER = "Select a playlist"
    PLAYLIST_SELECT_EXPIRED = "⌛ Playlist selection expired."
    PLAYLIST_STARTED = "🔀 Starting random playback from **{playlist_name}**"
    PLAYLISTS_HEADER = "📋 Available playlists:"
    PLAYLISTS_LINE = "{index}. **{name}** (ID: {playlist_id})"

    # Action Messages
    ACTION_SKIPPED = "⏭️ Skipped."
    ACTION_STOPPED = "⏹️ Stopped playback."
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_DISCONNECTED = "👋 Left the voice channel."

    # State Messages
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_NOTHING_PAUSED = "Nothing is paused."
    STATE_NOT_CONNECTED_TO_VOICE = "Not connected to a voice channel."
    STATE_NO_PLAYLISTS = "No playlists found."
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel first."
    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_VERIFY_VOICE_FAILED = "Could not verify your voice state."

    # Embed Fields
    EMBED_FIELD_ARTIST = "Artist"
    EMBED_FIELD_ALBUM = "Album"
    EMBED_FIELD_DURATION = "Duration"
    EMBED_FIELD_DISC = "Disc"
    EMBED_FIELD_TRACK = "Track"
    EMBED_FIELD_YEAR = "Year"
    EMBED_ARTWORK_FILENAME = "album.jpg"
