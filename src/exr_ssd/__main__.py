from exr_ssd.cli import main


raise SystemExit(main())
