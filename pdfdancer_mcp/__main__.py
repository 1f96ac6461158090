from pdfdancer_mcp.mcp_server import main

main()
