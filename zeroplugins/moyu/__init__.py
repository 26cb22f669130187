"""Holiday and weekend countdown reminders."""