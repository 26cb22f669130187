# zeroplugins

The logic behind a set of chat bot plugins, as plain Python that a bot
framework can call. You pass in the text of a command, or the pieces a
command's regular expression captured. You get back messages, files, stored
records and decisions.

## Installation

```
pip install zeroplugins
```

Rendering MIDI to WAV (`render_wav`, `str_to_music`) runs the `timidity`
program, so it must be installed and on `PATH`.

To run the tests, install the `test` extra and run `pytest` from the
project directory:

```
pip install "zeroplugins[test]"
pytest
```

## Modules

### `zeroplugins.timer`: group reminders

- `model.Timer` is a dataclass that packs enabled, month, day, weekday, hour and
  minute into one integer (`packed`). A field equal to -1 means "every".
  - `info()` returns the normalised description.
  - `timer_id()` returns a 32-bit id taken from the MD5 of that description.
- `parse.filled_timer(date_strs, bot_id, group_id, match_date_only)` builds a
  timer from regex groups 1 to 6: month, day or weekday, hour, minute,
  `用<url>` and alert. Each date field may be written in Arabic or Chinese
  numerals, such as `十二`, `每周六`, `二十五日` or `每`.
  - If a field is invalid, the timer stays disabled and the reason is put in
    `alert`.
  - `filled_cron_timer` builds a timer that runs from a cron expression.
  - `chinese_num_to_int` and `chinese_char_to_int` convert the numerals.
- `schedule.next_wake_time(timer, now)` returns the next time a date timer
  wakes, always later than `now`.
- `schedule.is_due(timer, now)` tells whether the timer's date fields match
  `now`.
- `schedule.first_weekday(date, week)` returns the first day of the month that
  falls on the given weekday.
- `cron.CronSchedule.parse(expr)` reads five-field cron expressions and
  descriptors such as `@daily` and `@every 1h30m`.
  - `next_after(when)` returns the next activation.
  - `cron.CronScheduler` runs registered functions on a background thread.
    Its methods are `add`, `remove`, `start` and `stop`.
- `clock.Clock(db_path, sender)` keeps timers in a SQLite table and fires
  them. When a timer fires, it calls `sender(self_id, group_id, message)`.
  - The message comes from `alert_message(timer)`: an @all segment, the alert
    text, and an image segment if the timer has a URL.
  - Methods: `register_timer`, `cancel_timer`, `list_timers`, `get_timer`,
    `add_timer_into_db`, `add_timer_into_map` and `close`.
  - `Clock` can be used as a context manager.

### `zeroplugins.manager`: group management

- `notice.GreetingStore` stores a welcome template and a farewell template for
  each group in SQLite.
- `notice.render_greeting` fills in the placeholders `{at}`, `{nickname}`,
  `{avatar}`, `{uid}`, `{gid}` and `{groupname}`.
- The join quiz uses `notice.make_question` and `notice.check_answer`.
- `notice.toggle_join_verification` and `notice.toggle_gist_approval` switch
  bits in a group's flags according to words such as `开启` or `关闭`.
- `notice.parse_join_answer` splits the `user/hash` answer from a join
  request.
- `gist.check_new_user` approves a join request when the user's gist holds a
  Unix timestamp less than ten minutes old.
  - The gist file is named by the MD5 of the group number (see `gist_url`).
  - Approved users are recorded in `gist.MemberStore`.
- `admin.ban_minutes` converts an amount and a unit into minutes, capped at
  43199.
- `admin.card_ok` and `admin.title_ok` check the byte-length limits.
- `admin.unescape_brackets` turns `&#91;` and `&#93;` back into `[` and `]`.
- `admin.pick_lucky_member` chooses at random among the ten members who sent a
  message most recently.

### `zeroplugins.midicreate`: music

- `midi.make_midi(path, text)` writes a note string such as
  `CCGGAAGR FFEEDDCR` as a violin MIDI file at 60 bpm.
  - `b` and `#` lower or raise a note.
  - A number sets the octave.
  - `<n` scales a note's length by 2**n.
  - `R` is a rest.
  - Bad text raises `MidiParseError`.
- `midi.parse_note`, `midi.note_name` and `midi.octave` handle single notes.
- `midi.render_wav` and `midi.str_to_music` produce WAV files using
  `timidity`.
- `practice.EarTraining(team, rng)` runs a five-round note-guessing game.
  - Each round allows three wrong answers when played alone, or ten in team
    mode.
  - `answer(user_id, text)` returns an `Outcome`.
  - `scoreboard(names)` lists the points.

### The smaller modules

- **`zeroplugins.moyu.holiday`**
  - `Holiday.parse(name, "days_year_month_day")` reads a holiday, and
    `to_record()` writes one back.
  - `Holiday.describe(now)` gives the countdown line.
  - `weekend_message` gives the weekend line.
  - `build_reminder` assembles the whole reminder.
- **`zeroplugins.nsfw.judge`**: turns classifier `Scores` into a verdict with
  `judge` and `auto_judge`. `auto_judge` returns `None` when nothing needs
  saying.
- **`zeroplugins.github.search`**
  - `search_repository(query)` returns the top result and raises
    `LookupError` if there is none.
  - `format_repository` and `preview_url` describe the result.
  - `net_get` raises `RuntimeError` for any status other than 200.
- **`zeroplugins.nbnhhsh.guess`**: `guess(text)` asks the guessing service what
  an abbreviation stands for. `extract_guesses` reads the service's response.
- **`zeroplugins.juejuezi.client`**: `juejuezi(verb, noun)` asks the generator
  for a sentence. `strip_keyword` removes `绝绝子` from a text.
- **`zeroplugins.hyaku.poems`**
  - `load_poems(path)` reads and checks the 100-poem CSV table.
  - `pick(poems, number)` returns one poem, or a random one.
  - `Poem` prints as a labelled block.
  - `image_urls` returns the image addresses.
- **`zeroplugins.nativesetu.store`**
  - `SetuStore(db_path)` indexes local picture folders, one class per
    folder. Methods: `scan_all`, `scan_class`, `list_classes`, `pick` and
    `count`.
  - `difference_hash` computes a 64-bit dHash with Pillow.
- **`zeroplugins.nativewife.wives`**
  - `draw_wife` picks a group's picture for a member. The same nickname on
    the same day always gets the same picture.
  - `add_wife` and `remove_wife` manage the group's folder.
  - `extract_name`, `group_folder`, `base36` and `can_add_wife` are helpers.
- **`zeroplugins.omikuji.kuji`**: `KujiStore.text(number)` reads the
  explanation of a fortune slip from SQLite. `image_urls` gives the slip's
  two images.

## Example

```python
from zeroplugins.timer.parse import filled_timer

timer = filled_timer(["", "12", "周六", "16", "30", "", "meeting"], 0, 42, False)
print(timer.info())      # [42]12月0日6周16:30
print(timer.enabled)     # True
```

## What the package does not do

- **No chat connection.** It does not connect to a chat service, match
  commands against incoming messages, or send anything by itself. `Clock`
  hands alerts to the `sender` you give it.
- **No image classification.** `nsfw.judge` works only from scores you supply.
- **No image rendering.** Nothing turns slip texts into images.
- **No downloads of data sets.** The poem CSV, the fortune slip texts and the
  holiday records are not fetched. Pass in a file, a database that already
  holds the texts, or record strings. `KujiStore` creates an empty `kuji`
  table if there is none, but it has no way to add texts.