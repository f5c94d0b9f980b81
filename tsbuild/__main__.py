from tsbuild.cli import main

raise SystemExit(main())
