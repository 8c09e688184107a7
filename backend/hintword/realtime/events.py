"""Socket.IO event names.

Inbound names are the commands clients send; outbound names are what the
server emits back, either to one connection or to a whole lobby room.
"""

# Inbound commands
CREATE_LOBBY = "createLobby"
JOIN_LOBBY = "joinLobby"
UPDATE_LOBBY_SETTINGS = "updateLobbySettings"
START_GAME = "startGame"
SUBMIT_GUESS = "submitGuess"
START_NEXT_ROUND = "startNextRound"
END_GAME = "endGame"
LEAVE_LOBBY = "leaveLobby"

# Outbound, requester only
LOBBY_CREATED = "lobbyCreated"
LOBBY_JOINED = "lobbyJoined"
LOBBY_LEFT = "lobbyLeft"
LOBBY_ERROR = "lobbyError"
INCORRECT_GUESS = "incorrectGuess"

# Outbound, whole lobby
LOBBY_UPDATED = "lobbyUpdated"
GAME_STARTED = "gameStarted"
ROUND_ENDED = "roundEnded"
GAME_ENDED = "gameEnded"
HINT = "hint"
CORRECT_GUESS = "correctGuess"
PLAYER_GUESS = "playerGuess"
