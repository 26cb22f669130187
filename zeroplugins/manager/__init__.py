"""Group management helpers: greetings, join quiz, gist approval and admin rules."""