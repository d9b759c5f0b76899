# zeroplug

Building blocks for a group chat bot. Each module stands alone. You call it from your own bot framework and send the results yourself.

## Modules

### Reminders

- `zeroplug.timerbits`
  - `Timer` is a reminder. Month, day, weekday, hour, minute and an enabled flag are packed into one integer (`emdwhm`). A field whose bits are all set reads as `-1`, which means "every".
  - `Timer.info()` gives the timer's canonical text, and `Timer.timer_id()` a 32-bit id made from that text.
  - `filled_timer(date_strs, bot_id, group_id, match_date_only)` builds a timer from the captured parts of a Chinese reminder phrase. Numbers may be written as `12`, `十二` or `每`. If the input is invalid you get a disabled timer whose `alert` gives the reason.
  - `filled_cron_timer(...)` builds a timer that runs on a cron expression.
  - `chinese_num_to_int` and `chinese_char_to_int` convert Chinese numerals.
- `zeroplug.schedule`
  - `next_wake_time(timer, now)` gives the next time a calendar timer should be checked.
  - `is_due(timer, now)` says whether the timer fires at `now`.
  - `first_weekday(date, weekday)` gives the first day in a month that falls on a given weekday, counting Sunday as 0.
- `zeroplug.clock`
  - `Clock(db_path, sender)` keeps timers in memory and in an SQLite table, and runs each one in a background thread. When a timer fires, the clock calls `sender(group_id, segments)`.
  - Its methods are `register`, `cancel`, `get`, `list_timers`, `add_to_db`, `add_to_map` and `close`. A `Clock` is also a context manager.
  - `CronSpec.parse` reads five-field cron expressions. They may use ranges, steps, names and `@daily`-style shortcuts. `CronSpec.matches` tests a moment and `CronSpec.next_after` finds the next one.
  - `timer_message(timer)` builds the message segments a timer sends: @all, the alert text, and the picture if the timer has one.
- `zeroplug.moyu`
  - `Holiday` parses and writes `days_year_month_day` records with `from_record` and `to_record`. `describe(now)` counts down to the holiday.
  - `weekend(now)` and `daily_message(holidays, now)` build the daily reminder text.

### Group management

- `zeroplug.manager`
  - `render_welcome` fills `{at}`, `{nickname}`, `{avatar}`, `{uid}`, `{gid}` and `{groupname}` in a template with CQ codes.
  - `ban_minutes` converts a ban length to minutes. The result is capped just below one month.
  - `unescape_cq` restores escaped CQ brackets.
  - Join checks with a gist: `parse_join_answer` reads the "user/hash" answer, `gist_url` builds the gist address, `verify_gist_timestamp` accepts a timestamp within ten minutes, and `check_new_user` runs the whole check. `MemberStore` records in SQLite the members admitted this way.
- `zeroplug.groupadmin`
  - `JoinQuiz` is the addition question a newcomer answers.
  - `toggle_flag` turns a bit in a group's plugin data on or off.
  - `format_essence` formats one entry of the essence message list.
  - `pick_member` picks one of the ten members who spoke most recently.
  - `parse_cron_reminder` splits the captured parts of a cron reminder command.
  - `card_too_long` and `title_too_long` check a group card or title against its byte limit.

### Music

- `zeroplug.midi`
  - `build_track` and `write_midi` turn note text such as `CCGGAAGR` or `C#6<-1` into MIDI. Bad input raises `NoteSyntaxError`.
  - `midi_to_text` turns one track of a MIDI file back into note text.
  - `parse_note`, `note_name` and `octave` work with single notes.
  - `render_wav` converts MIDI to WAV by running the external `timidity` program, which must be installed.
  - `ListeningQuiz` runs a five-question "name the note" quiz, played alone or as a team. `random_target` picks a note and `validate_timbre` checks an instrument number.

### Content

- `zeroplug.heisi`: `load_items` splits a data file into 10-byte `Item` records, `Item.url()` unpacks a picture address, and `random_url` picks one at random.
- `zeroplug.hyaku`: `load_poems` reads the hundred-poem CSV into `Poem` records, and `image_names` gives a poem's picture file names.
- `zeroplug.jandan`: `PictureStore` keeps picture URLs in SQLite, keyed by `picture_id`, which is a CRC-64/ISO checksum. `parse_page` and `page_number` read a board page.

### Web lookups

All of these use `requests`.

- `zeroplug.jiami`: `encrypt` and `decrypt` beast speak. `encrypt_url`, `decrypt_url` and `parse_reply` are also available.
- `zeroplug.juejuezi`: `generate(verb, noun)`, with `split_input` and `request_body`.
- `zeroplug.jikipedia`: `lookup` searches the slang dictionary, `first_definition` picks the first definition from a reply, and `format_definition` formats it.
- `zeroplug.hearthstone`: `search_cards`, `deck_image` and `find_deck_code`, plus the URL helpers `extract_hash`, `search_url` and `deck_url`.
- `zeroplug.pixiv_search`: `search`, `parse_result`, `format_tags` and `clean_description`. An error reported by the service raises `SearchError`.

## Example

```python
from datetime import datetime
from zeroplug.timerbits import filled_timer
from zeroplug.schedule import next_wake_time

t = filled_timer(["", "12", "周六", "16", "30", "", "meeting"], 0, 123, False)
print(t.info(), next_wake_time(t, datetime.now()))
```

## What it does not do

- It does not connect to a chat service. It does not listen for messages, match commands or check permissions, and it has no command-line program.
- It sends nothing itself. `Clock` hands reminder messages to the `sender` you pass in.
- It does not download or cache pictures or data files, render images, or fetch holiday records from a server. You supply that data.
- It has no random illustration feed.

## Installing

```
pip install .
pip install .[test]
pytest
```