"""Group reminder timers: packed fields, parsing, scheduling, cron and a persistent clock."""