from advancement_toolkit.cli import main

raise SystemExit(main())
