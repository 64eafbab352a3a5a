"""Run the shipdock-kvstore command line tool."""

from shipdock_kvstore.tool.shipdock_kvstore import main

if __name__ == "__main__":
    main()
