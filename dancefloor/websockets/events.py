"""
Socket.IO event names shared by the hub, the engine and the handlers.
"""

# Inbound
JOIN_DANCEFLOOR = "joinDancefloor"

# Inbound and broadcast under the same name
SONG_REQUEST = "songRequest"
SEND_MESSAGE = "sendMessage"
STATUS_UPDATE = "statusUpdate"
LIKE_SONG_REQUEST = "likeSongRequest"

# Broadcast only
JOIN_NOTICE = "message"
UPDATE_REQUESTS_COUNT = "updateRequestsCount"
UPDATE_MESSAGES_COUNT = "updateMessagesCount"
REORDER_REQUESTS = "reorderRequests"

# Sent back to the originating connection only
SONG_REQUEST_ERROR = "songRequestError"
MESSAGE_ERROR = "messageError"
STATUS_UPDATE_ERROR = "statusUpdateError"
LIKE_ERROR = "likeError"
