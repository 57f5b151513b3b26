"""Centralized message constants for error messages, validation, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"

    # Queue Rules
    INVALID_VOLUME = "Volume must be between 0 and 100"
    INVALID_LOOP_MODE = "Unknown loop mode: {mode!r}. Use off, song or queue"
    NOT_ENOUGH_TRACKS = "Not enough tracks to shuffle"
    CANNOT_REMOVE_CURRENT = "The current track cannot be removed; skip it instead"
    QUEUE_ALREADY_EMPTY = "Queue is already empty"

    # Configuration Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"

    # Audio/Stream Errors
    NO_STREAM_URL_FOR_TRACK = "No stream URL found for {title}"
    STREAM_FETCH_TIMEOUT = "Timed out after {timeout}s fetching a stream for {title}"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild {guild_id}"

    # Spotify Errors
    SPOTIFY_TOKEN_FAILED = "Spotify token request failed with status {status}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Idle Eviction
    EVICTION_STARTED = "Idle eviction job started"
    EVICTION_STOPPED = "Idle eviction job stopped"
    EVICTION_ALREADY_RUNNING = "Idle eviction job is already running"
    EVICTION_CYCLE_RUNNING = "Running idle eviction sweep"
    EVICTION_COMPLETED = "Idle eviction completed: %s groups evicted"
    EVICTION_FAILED = "Idle eviction sweep failed: %r"
    EVICTION_GROUP_FAILED = "Failed to evict guild %s: %r"

    # Cache Operations
    CACHE_HIT_URL = "Cache hit for URL: %s"
    CACHE_EXPIRED_PRUNED = "Pruned %d expired cache entries"

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_CLEANUP_ERROR = "Error during voice cleanup"
    VOICE_CALLBACK_ERROR = "Error in voice callback for guild %s"
    VOICE_EXTERNAL_DISCONNECT = "Bot was disconnected from voice in guild %s"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    GUILD_NOT_FOUND = "Guild %s not found"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_FINISHED = "Queue finished in guild %s"
    PLAYBACK_FETCH_FAILED = "Failed to fetch stream for '%s' in guild %s"
    PLAYBACK_FETCH_TIMEOUT = "Stream fetch for '%s' timed out in guild %s"
    PLAYBACK_FETCH_CANCELLED = "Cancelled pending stream fetch in guild %s"
    PLAYBACK_TRANSPORT_ERROR = "Transport error in guild %s: %s"
    PLAYBACK_STALE_NOTIFICATION = "Ignoring stale %s notification for play %s in guild %s"
    PLAYBACK_NOTIFY_FAILED = "Notification callback %s failed for guild %s"
    PLAYBACK_VOLUME_FAILED = "Failed to apply volume in guild %s"
    PLAYBACK_DISCONNECT_HANDLED = "Dropped queue state for disconnected guild %s"

    # Track Operations
    TRACK_SKIPPED = "Skipped track: %s in guild %s"
    TRACK_FINISHED = "Track finished: %s in guild %s"

    # Queue Operations
    QUEUE_CREATED = "Created queue for guild %s"
    QUEUE_REMOVED_GUILD = "Removed queue for guild %s"
    QUEUE_ENQUEUED = "Enqueued track '%s' at position %s in guild %s"
    QUEUE_REMOVED = "Removed track '%s' from queue in guild %s"
    QUEUE_CLEARED = "Cleared %s tracks from queue in guild %s"
    QUEUE_SHUFFLED = "Shuffled queue in guild %s"
    VOLUME_CHANGED = "Volume set to %s in guild %s"
    LOOP_MODE_CHANGED = "Loop mode changed to %s in guild %s"

    # Mailbox
    MAILBOX_CREATED = "Created mailbox for guild %s"
    MAILBOX_CLOSED = "Closed mailbox for guild %s"
    MAILBOX_OPERATION_FAILED = "Mailbox operation failed in guild %s"

    # Cog Lifecycle
    COG_LOADED_HEALTH = "Health cog loaded, status loop started"
    COG_UNLOADED_HEALTH = "Health cog unloaded, status loop stopped"
    COG_NOTIFY_FAILED = "Failed to send notification to channel %s"

    # Health/Status
    STATUS_WRITTEN = "Status snapshot written to %s"
    STATUS_WRITE_FAILED = "Failed to write status snapshot"
    STATUS_MEMORY_UNAVAILABLE = "Could not read process memory"

    # Resolution/Search
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    YTDLP_FAILED_INFO_TO_TRACK = "Failed to convert info to track"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_CROSS_RESOLVE = "Failed to find a playable match for %r"
    LOOKUP_ROUTED = "Routing query %r to %s"
    LOOKUP_NOT_FOUND = "No track found for %r"

    # Spotify
    SPOTIFY_DISABLED = "Spotify credentials missing; Spotify resolution disabled"
    SPOTIFY_TOKEN_REFRESHED = "Spotify access token refreshed (expires in %ss)"
    SPOTIFY_REQUEST_FAILED = "Spotify request failed for %s"
    SPOTIFY_FAILED_TRACK = "Failed to parse Spotify track %s"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord Queue Bot in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_CATALOGS_ENABLED = "Catalogs enabled: %s"
    SETTINGS_INVALID = "Invalid configuration:\n%s"
    LOGGING_CONFIG_FALLBACK = "Could not load %s (%s), falling back to basic config"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown did not finish within %ss"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"

    # Bot Error Handling
    BOT_COMMAND_ERROR = "Command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    BOT_EVICTION_START_FAILED = "Failed to start idle eviction job: %s"
    BOT_EVICTION_STOP_ERROR = "Error stopping idle eviction job: %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord messages.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Queue Feedback
    QUEUED_AT_POSITION = "✅ Added **{track_title}** to the queue at position {position}."
    LOADING_TRACK = "🔍 Loading **{track_title}**..."

    # Action Messages
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_SKIPPED = "⏭️ Skipped: **{track_title}**"
    ACTION_SHUFFLED = "🔀 Shuffled the queue."
    ACTION_VOLUME_SET = "🔊 Volume set to **{volume}%**."
    ACTION_VOLUME_CURRENT = "🔊 Current volume: **{volume}%**."
    ACTION_LOOP_MODE_CHANGED = "🔁 Loop mode: **{mode}**"
    ACTION_TRACK_REMOVED = "🗑️ Removed: **{track_title}**"
    ACTION_QUEUE_CLEARED = "🗑️ Cleared {count} tracks from the queue."

    # Playback Notifications
    TRACK_FAILED_SKIPPING = "❌ Could not play **{track_title}**, skipping to the next track."
    QUEUE_FINISHED = "✅ Queue finished. Leaving the voice channel."

    # Error Messages
    ERROR_TRACK_NOT_FOUND = "❌ Couldn't find a track for: {query}"
    ERROR_NO_SEARCH_RESULTS = "❌ No results for: {query}"
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_INVALID_POSITION = "❌ Invalid position: {position}. The queue has {length} tracks."
    ERROR_CANNOT_REMOVE_CURRENT = "❌ That track is playing right now. Use `{prefix}skip` instead."
    ERROR_VOLUME_RANGE = "❌ Volume must be between 0 and 100."
    ERROR_LOOP_USAGE = "❌ Current loop mode: **{mode}**. Usage: `{prefix}loop [off|song|queue]`"
    ERROR_MISSING_ARGUMENT = "❌ Missing argument: {param_name}. Usage: `{usage}`"
    ERROR_INVALID_ARGUMENT = "❌ Invalid argument. Usage: `{usage}`"
    ERROR_COMMAND_FAILED_SEE_LOGS = "❌ Command failed. See logs."
    ERROR_QUERY_REQUIRED = "❌ Provide a URL or a search query."

    # State Messages
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_NOTHING_PLAYING_OR_PAUSED = "Nothing is playing or already paused."
    STATE_NOTHING_PAUSED = "Nothing is paused."
    STATE_QUEUE_EMPTY = "Queue is empty."
    STATE_QUEUE_ALREADY_EMPTY = "Queue is already empty."
    STATE_NOT_ENOUGH_TRACKS_TO_SHUFFLE = "Not enough tracks to shuffle."
    STATE_MUST_BE_IN_VOICE = "You must be in a voice channel to use this command!"
    STATE_SERVER_ONLY = "This command can only be used in a server."

    # Embed Titles
    EMBED_NOW_PLAYING = "🎵 Now Playing"
    EMBED_QUEUED = "✅ Added to Queue"
    EMBED_QUEUE = "📋 Queue ({total_tracks} tracks)"
    EMBED_QUEUE_FOOTER = "Showing {shown} of {total_tracks} · Total length {total_duration}"
    EMBED_SEARCH_RESULTS = "🔍 Search results for: {query}"
    EMBED_SEARCH_FOOTER = "Use {prefix}play <url> to queue one of these."
    EMBED_HELP = "🎶 Music Commands"
    EMBED_BOT_STATUS = "🤖 Bot Status"

    # Embed Fields
    FIELD_ARTIST = "Artist"
    FIELD_DURATION = "Duration"
    FIELD_SOURCE = "Source"
    FIELD_REQUESTED_BY = "Requested by"
    FIELD_POSITION = "Position"
    FIELD_STATUS = "Status"
    FIELD_GUILDS = "Servers"
    FIELD_ACTIVE_QUEUES = "Active queues"
    FIELD_UPTIME = "Uptime"
    FIELD_LOOP = "Loop"
    FIELD_VOLUME = "Volume"


class EmojiConstants:
    """Emoji constants for consistent visual feedback."""

    CURRENT_MARKER = "▶"
    LOOP = "🔁"
    LOOP_ONE = "🔂"
    ONLINE = "🟢"
    OFFLINE = "🔴"
