# wallfeed

wallfeed follows one or more Walltaker links. It keeps a websocket
connection to `wss://walltaker.joi.how/cable` open, subscribes to each of
your link IDs and announces itself on them. When a link's wallpaper
changes, wallfeed downloads the new image to a fixed file in your data
directory.

## Installation

```
pip install .
```

## Usage

```
wallfeed [--ids IDS] [--run-on-boot | --no-run-on-boot]
         [--save-current DEST] [--data-dir] [--refresh]
```

With no options, wallfeed loads its settings, connects and runs until you
press Ctrl+C. It prints every frame it sends (`=> ...`) and receives
(`<= ...`). Each time an image is downloaded, it prints
`Wallpaper updated: <path>`.

Options:

- `--ids IDS` sets the link IDs to follow, as one whitespace-separated
  string such as `--ids "1234 5678"`. Input that is not a list of
  non-negative integers is rejected with exit status 2.
- `--run-on-boot` / `--no-run-on-boot` turns run-on-boot on or off.
- `--save-current DEST` copies the most recently downloaded wallpaper to
  `DEST` and exits.
- `--data-dir` prints the data directory and exits.
- `--refresh` asks the server to resend the current wallpaper of the
  lowest subscribed link ID once the connection is ready.

If `--ids` or a run-on-boot option changes the settings, wallfeed
unsubscribes from removed IDs, subscribes to added ones, applies the
run-on-boot setting and saves the settings file.

### Files

Settings are kept in `settings.json`, for example:

```json
{"ids":[1234,5678],"run_on_boot":false}
```

A missing or malformed settings file is treated as no links and
run-on-boot off. The downloaded image is saved as `wallfeed-current`.

| Platform | Config directory | Data directory |
|----------|------------------|----------------|
| Windows  | `%APPDATA%\wallfeed\config` | `%APPDATA%\wallfeed\data` |
| macOS    | `~/Library/Application Support/wallfeed` | same |
| Other    | `$XDG_CONFIG_HOME/wallfeed` (default `~/.config/wallfeed`) | `$XDG_DATA_HOME/wallfeed` (default `~/.local/share/wallfeed`) |

### Run on boot

When run-on-boot is enabled, the running program file is copied into the
startup directory; when it is disabled, that copy is removed:

- on Windows, `%APPDATA%\Microsoft\Windows\Start Menu\Programs\Startup`
- on Linux, `$XDG_CONFIG_HOME/autostart`

On other platforms, or when that variable is unset, a warning is logged
and nothing is copied.

## Library use

`wallfeed.protocol` handles the link channel messages:

- `subscribe_message`, `unsubscribe_message`, `check_message` and
  `announce_message` build outgoing frames for a link ID; `identifier`
  builds the channel identifier.
- `subscribe_to`, `unsubscribe_from` and `check` send those frames through
  any object with a `send(str)` method.
- `parse_incoming` turns a server frame into `Welcome`, `Ping`,
  `ConfirmSubscription`, `Disconnect` or `LinkMessage` (whose `message` is
  a `WallpaperUpdate`), and raises `ProtocolError` on anything else.

`wallfeed.settings` provides `Settings` (with `to_json` and `from_json`),
`read_settings`, `save_settings`, `parse_ids` (raising `InvalidIdsError`),
`format_ids` and `startup_dir`.

`wallfeed.client` provides `WalltakerClient`, which wraps a connection
with `send` and `recv` methods. Its `handle_message`, `update_settings`,
`refresh` and `poll` methods do the work described above. The
`set_wallpaper` and `fetch` arguments choose what happens to a new image
and how it is downloaded; the defaults print the path and use `download`.
`sync_run_on_boot` installs or removes the startup copy.

## What wallfeed does not do

- It does not change the desktop background by itself. By default it only
  downloads the image and prints its path; pass your own `set_wallpaper`
  callable to `WalltakerClient` to apply it.
- It has no tray icon or settings window; settings are changed with
  command-line options or by editing `settings.json`.
- It does not act on `Disconnect` messages and does not reconnect when the
  connection drops.
- Only one link is refreshed by `--refresh`, the one with the lowest ID.

## Development

```
pip install -e .[test]
pytest
```