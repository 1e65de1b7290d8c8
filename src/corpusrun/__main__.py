from corpusrun.cli.main import main

raise SystemExit(main())
